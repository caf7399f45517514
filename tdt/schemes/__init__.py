"""Built-in scheme definitions, as documents for :mod:`tdt.loader`."""

from .dod import DOD_DEFINITIONS
from .gid import GID_DEFINITIONS
from .gs1 import GS1_DEFINITIONS

BUILTIN_DEFINITIONS = GS1_DEFINITIONS + GID_DEFINITIONS + DOD_DEFINITIONS

__all__ = ['BUILTIN_DEFINITIONS']
