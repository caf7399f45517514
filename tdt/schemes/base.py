"""Helpers to write scheme definition documents."""

from ..model import EXTRACT, FORMAT, LEFT

DIGITS = '[0-9]*'

# decimal without leading zeros
NUMBER = '(0|[1-9][0-9]*)'


def field(name, seq, **attrs):
    doc = {'name': name, 'seq': seq}
    doc.update(attrs)
    return doc


def bits(name, seq, bit_length, **attrs):
    """Binary field, zero padded on the left unless told otherwise."""
    attrs.setdefault('bit_pad_dir', LEFT)
    return field(name, seq, bit_length=bit_length, **attrs)


def number(name, seq, maximum, minimum=0, **attrs):
    return field(name, seq, character_set=DIGITS,
                 decimal_minimum=str(minimum), decimal_maximum=str(maximum),
                 **attrs)


def padded_number(name, seq, digits, bit_length=None):
    """Decimal field of exactly digits characters, zero padded on the left.

    When bit_length is given, the maximum is also capped to what fits in
    that many bits.
    """
    maximum = 10 ** digits - 1
    if bit_length is not None:
        maximum = min(maximum, (1 << bit_length) - 1)
    return number(name, seq, maximum, length=digits, pad_char='0',
                  pad_dir=LEFT)


def binary_string(value, width):
    return '{:0{}b}'.format(value, width)


def _rules(rule_type, assignments):
    return [{'type': rule_type, 'seq': seq, 'new_field_name': name,
             'function': function}
            for seq, (name, function) in enumerate(assignments, 1)]


def extract_rules(*assignments):
    return _rules(EXTRACT, assignments)


def format_rules(*assignments):
    return _rules(FORMAT, assignments)


def level(level_type, prefix_match, options, rules=()):
    return {'type': level_type, 'prefix_match': prefix_match,
            'options': list(options), 'rules': list(rules)}


def option(key, pattern, grammar, fields):
    return {'option_key': str(key), 'pattern': pattern, 'grammar': grammar,
            'fields': list(fields)}


def scheme(name, tag_length, option_key, levels):
    return {'name': name, 'tag_length': tag_length, 'option_key': option_key,
            'levels': list(levels)}
