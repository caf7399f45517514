"""In-memory scheme model.

A Scheme holds one Level per representation; a Level holds the Options
(one per option key value) and the EXTRACT/FORMAT rules; an Option holds
the regular expression, the grammar and the Fields it captures.

Instances are built once by :mod:`tdt.loader` and are never modified
afterwards, which is what makes a single engine safe to share between
callers.
"""

import re
from collections import namedtuple
from operator import attrgetter

from .tdt_errors import SchemeDefinitionError

# Level types
BINARY = 'BINARY'
TAG_ENCODING = 'TAG_ENCODING'
PURE_IDENTITY = 'PURE_IDENTITY'
LEGACY = 'LEGACY'
ONS_HOSTNAME = 'ONS_HOSTNAME'
LEVEL_TYPES = (BINARY, TAG_ENCODING, PURE_IDENTITY, LEGACY, ONS_HOSTNAME)

# Pad directions
LEFT = 'LEFT'
RIGHT = 'RIGHT'
PAD_DIRECTIONS = (LEFT, RIGHT)

# Rule types
EXTRACT = 'EXTRACT'
FORMAT = 'FORMAT'
RULE_TYPES = (EXTRACT, FORMAT)

COMPACTIONS = ('5-bit', '6-bit', '7-bit', '8-bit')


Field = namedtuple('Field', [
    'name', 'seq', 'length', 'bit_length', 'pad_char', 'pad_dir',
    'bit_pad_dir', 'compaction', 'character_set', 'decimal_minimum',
    'decimal_maximum'], defaults=(None,) * 9)

Rule = namedtuple('Rule', [
    'seq', 'type', 'function', 'new_field_name', 'call', 'table_url',
    'table_xpath'], defaults=(None, None))


class Option(object):
    __slots__ = ['key', 'pattern', 'grammar', 'fields', 'regex',
                 '_fields_by_name']

    def __init__(self, key, pattern, grammar, fields):
        self.key = key
        self.pattern = pattern
        self.grammar = grammar
        try:
            self.regex = re.compile(pattern)
        except re.error as err:
            raise SchemeDefinitionError(
                'Invalid pattern for option {}: {}'.format(key, err))
        self.fields = tuple(fields)
        self._fields_by_name = {}
        for field in self.fields:
            if not 1 <= field.seq <= self.regex.groups:
                raise SchemeDefinitionError(
                    'Field {} of option {} refers to capture group {} but '
                    'the pattern only has {}'.format(
                        field.name, key, field.seq, self.regex.groups))
            self._fields_by_name[field.name] = field

    def field(self, name):
        return self._fields_by_name.get(name)

    def match(self, value):
        """Match the pattern at the start of value (None if no match)."""
        return self.regex.match(value)

    def __repr__(self):
        return 'Option({!r}, {!r})'.format(self.key, self.pattern)


class Level(object):
    __slots__ = ['type', 'prefix_match', 'options', 'extract_rules',
                 'format_rules', '_options_by_key']

    def __init__(self, level_type, prefix_match, options, rules=()):
        if level_type not in LEVEL_TYPES:
            raise SchemeDefinitionError(
                'Unknown level type: {}'.format(level_type))
        self.type = level_type
        self.prefix_match = prefix_match
        self.options = tuple(options)
        self._options_by_key = {}
        for opt in self.options:
            if opt.key in self._options_by_key:
                raise SchemeDefinitionError(
                    'Duplicate option {} in level {}'.format(opt.key,
                                                             level_type))
            self._options_by_key[opt.key] = opt

        by_seq = attrgetter('seq')
        self.extract_rules = tuple(sorted(
            (r for r in rules if r.type == EXTRACT), key=by_seq))
        self.format_rules = tuple(sorted(
            (r for r in rules if r.type == FORMAT), key=by_seq))

    def option(self, key):
        return self._options_by_key.get(key)

    def __repr__(self):
        return 'Level({}, prefix={!r})'.format(self.type, self.prefix_match)


class Scheme(object):
    __slots__ = ['name', 'tag_length', 'option_key', 'levels',
                 '_levels_by_type']

    def __init__(self, name, tag_length, option_key, levels):
        self.name = name
        self.tag_length = int(tag_length)
        self.option_key = option_key
        self.levels = tuple(levels)
        self._levels_by_type = {}
        for level in self.levels:
            if level.type in self._levels_by_type:
                raise SchemeDefinitionError(
                    'Scheme {} defines level {} twice'.format(name,
                                                              level.type))
            self._levels_by_type[level.type] = level

    def level(self, level_type):
        return self._levels_by_type.get(level_type)

    def __repr__(self):
        return 'Scheme({}, tag_length={})'.format(self.name, self.tag_length)
