"""EPC Tag Data Translation in pure Python
"""

from .version import __version__ as tdt_version
from .engine import TDTEngine
from .model import (BINARY, TAG_ENCODING, PURE_IDENTITY, LEGACY,
                    ONS_HOSTNAME, LEVEL_TYPES)


__all__ = ('engine', 'model', 'loader', 'schemes', 'tdt_errors', 'util',
           'log', 'TDTEngine', 'BINARY', 'TAG_ENCODING', 'PURE_IDENTITY',
           'LEGACY', 'ONS_HOSTNAME', 'LEVEL_TYPES')

__version__ = tdt_version
