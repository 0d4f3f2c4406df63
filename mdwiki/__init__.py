"""
mdwiki - a minimal personal wiki serving markdown documents from a folder.
"""

from mdwiki.version_info import __version__

__all__ = ["__version__"]
