"""
External executables the build relies on.

Key submodules:
- executable: Executable names, hints and version requirements
- runner: Version check and execution
"""

__all__ = ()
