"""SpaceProof command-line interface."""
from spaceproof import __version__

__all__ = ["__version__"]
