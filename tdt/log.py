"""
Logging setup

Every tdt module logs through get_logger(__name__). Conversions trace
each resolved scheme, field and rule with debugfast, which stays silent
unless init_logging(debug=True) (or the CLI's --debug) turned it on.
"""

import logging
import sys
# Global
general_debug_enabled = False

LOG_FORMAT = '%(asctime)s %(name)s: %(levelname)s: %(message)s'

# handlers installed by the last init_logging call
_installed_handlers = []


def set_general_debug(debug=False):
    global general_debug_enabled
    general_debug_enabled = debug


def is_general_debug_enabled():
    return general_debug_enabled


def _make_handler(handler, formatter, level, max_level=None):
    handler.setFormatter(formatter)
    handler.setLevel(level)
    if max_level is not None:
        handler.addFilter(MaxLevelFilter(max_level))
    return handler


def init_logging(debug=False, logfile=None, logger_name=None):
    """Initialize logging.

    Records below WARNING go to stdout, the others to stderr, and all of
    them to logfile when one is given. Handlers are attached to the root
    logger unless logger_name (e.g. 'tdt') names another one. Calling
    init_logging again replaces the handlers of the previous call, so a
    process converting batch after batch does not print every record
    twice.
    """
    set_general_debug(debug)

    loglevel = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT)

    handlers = [
        _make_handler(logging.StreamHandler(sys.stdout), formatter, loglevel,
                      max_level=logging.WARNING),
        _make_handler(logging.StreamHandler(sys.stderr), formatter,
                      max(loglevel, logging.WARNING)),
    ]
    if logfile:
        handlers.append(_make_handler(logging.FileHandler(logfile),
                                      formatter, loglevel))

    target = logging.getLogger(logger_name)
    for handler, owner in _installed_handlers:
        owner.removeHandler(handler)
        handler.close()
    del _installed_handlers[:]

    target.setLevel(loglevel)
    for handler in handlers:
        target.addHandler(handler)
        _installed_handlers.append((handler, target))
    return target


def debugfast(self, *args, **kwargs):
    """logging debug func that is more efficient when debug is disabled.

    Conversions trace every field and rule they touch, so even the
    isEnabledFor check done by logging.debug adds up over a batch of
    conversions.
    """
    if general_debug_enabled:
        self.debug(*args, **kwargs)


def get_logger(module_name):
    """Return a logger object providing the custom debugfast function.

    Inject a tdt specific debugfast function inside the current
    LoggerClass.
    """
    logger_cls = logging.getLoggerClass()
    logger_cls.debugfast = debugfast
    return logging.getLogger(module_name)


class MaxLevelFilter(logging.Filter):
    '''Filters (lets through) all messages with level < LEVEL'''
    def __init__(self, level):
        super().__init__()
        self.level = level

    def filter(self, record):
        # "<" instead of "<=": logger.setLevel is inclusive
        return record.levelno < self.level
