"""Find the scheme and level an input value belongs to.

Every level with a prefix is indexed in a PrefixTree per level type.
A lookup collects the levels whose prefix starts the input, then narrows
them down by tag length and finally by matching the option patterns.
"""

from collections import namedtuple

from .log import get_logger
from .model import LEVEL_TYPES
from .prefix_tree import PrefixTree
from .tdt_errors import AmbiguousMatchError, FieldValueError, NoMatchError

logger = get_logger(__name__)

PrefixMatch = namedtuple('PrefixMatch', ['scheme', 'level', 'tag_length'])


def build_prefix_trees(schemes):
    trees = {level_type: PrefixTree() for level_type in LEVEL_TYPES}
    for scheme in schemes:
        for level in scheme.levels:
            if level.prefix_match:
                trees[level.type].insert(
                    level.prefix_match,
                    PrefixMatch(scheme, level, str(scheme.tag_length)))
    return trees


def _matches_pattern(prefix_match, value):
    return any(opt.match(value) for opt in prefix_match.level.options)


def _describe(matches):
    return ', '.join('{}/{}'.format(m.scheme.name, m.level.type)
                     for m in matches)


def find_prefix_match(trees, value, tag_length=None, level_type=None):
    """Return the PrefixMatch for value.

    When tag_length is given, levels of schemes with that tag length are
    preferred. A single level of another tag length is accepted in their
    absence; the returned scheme then carries the tag length to use.
    Remaining ties are broken by which levels have an option pattern
    matching value.
    """
    level_types = LEVEL_TYPES if level_type is None else (level_type,)
    candidates = []
    for ltype in level_types:
        candidates.extend(trees[ltype].search(value))
    if not candidates:
        raise NoMatchError('No schemes or levels matched the input '
                           'value {!r}'.format(value))

    if tag_length is not None:
        try:
            tag_length = int(tag_length)
        except (TypeError, ValueError):
            raise FieldValueError(
                'taglength is not a number: {!r}'.format(tag_length))
        exact = [m for m in candidates if m.scheme.tag_length == tag_length]
        alternates = [m for m in candidates
                      if m.scheme.tag_length != tag_length]
        if exact:
            candidates = exact
        elif len(alternates) == 1:
            logger.info('Input %r has no level for tag length %s, using '
                        '%s (tag length %s)', value, tag_length,
                        alternates[0].scheme.name,
                        alternates[0].scheme.tag_length)

    if len(candidates) > 1:
        logger.debugfast('Several levels match %r: %s', value,
                         _describe(candidates))
        candidates = [m for m in candidates if _matches_pattern(m, value)]
        if not candidates:
            raise NoMatchError('No option pattern matched the input '
                               'value {!r}'.format(value))
        if len(candidates) > 1:
            raise AmbiguousMatchError(
                'More than one scheme/level matched the input value {!r}: '
                '{}'.format(value, _describe(candidates)))

    match = candidates[0]
    logger.debugfast('Input %r matched %s', value, _describe([match]))
    return match
