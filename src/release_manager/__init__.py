"""GitHub Release Manager.

Automates cutting release-candidate branches and releases on GitHub, and
fetches the repository/release snapshot a UI shows before doing so.
"""

__version__ = "0.1.0"
