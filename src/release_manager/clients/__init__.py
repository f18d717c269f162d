"""Clients for the remote systems the release manager talks to."""
