"""Field level decoding and encoding.

Binary fields are related to their counterpart in the TAG_ENCODING level
of the same option: that field carries the character set, the decimal
limits and the character padding of the textual form.
"""

from .compaction import binary_to_string, compaction_width, string_to_binary
from .log import get_logger
from .model import LEFT, RIGHT
from .tdt_errors import (BitLengthOverflowError, FieldValueError,
                         MissingFieldError, SchemeDefinitionConflictError)
from .util import (apply_pad_char, bin2dec, dec2bin, strip_binary_padding,
                   strip_pad_char)

logger = get_logger(__name__)


def _counterpart(tag_option, name):
    if tag_option is None:
        return None
    return tag_option.field(name)


def _pad_conflict(field):
    return SchemeDefinitionConflictError(
        'Field {} declares a pad character in both its binary and its '
        'non-binary form'.format(field.name))


def decode_binary_field(field, bits, tag_field, validator):
    if field.compaction:
        if field.bit_pad_dir:
            bits = strip_binary_padding(bits, field.bit_pad_dir,
                                        compaction_width(field.compaction))
        if '1' not in bits:
            value = ''
        else:
            value = binary_to_string(bits, field.compaction)
    else:
        if field.bit_pad_dir:
            bits = strip_binary_padding(bits, field.bit_pad_dir)
        value = bin2dec(bits)
        if tag_field is not None:
            validator.check_range(field.name, value,
                                  tag_field.decimal_minimum,
                                  tag_field.decimal_maximum)

    if field.pad_char is not None:
        if tag_field is not None and tag_field.pad_char is not None:
            raise _pad_conflict(field)
        value = strip_pad_char(value, field.pad_dir, field.pad_char)
    elif tag_field is not None and tag_field.pad_char is not None:
        value = apply_pad_char(value, tag_field.pad_dir, tag_field.pad_char,
                               tag_field.length)

    if tag_field is not None:
        if field.compaction:
            validator.check_character_set(field.name, value,
                                          tag_field.character_set)
        if tag_field.length == 0:
            value = ''
    return value


def decode_fields(option, match, binary, tag_option, validator):
    """Extract the field values captured by match.

    Binary captures are turned into their textual form; other captures
    are taken as they are.
    """
    values = {}
    for field in option.fields:
        raw = match.group(field.seq) or ''
        tag_field = _counterpart(tag_option, field.name)
        if binary:
            value = decode_binary_field(field, raw, tag_field, validator)
        else:
            value = raw
            if tag_field is not None:
                validator.check_field(tag_field, value)
                if tag_field.length == 0:
                    value = ''
        logger.debugfast('Field %s = %r', field.name, value)
        values[field.name] = value
    return values


def encode_binary_field(field, value, tag_field, validator):
    if field.compaction and tag_field is not None:
        validator.check_character_set(field.name, value,
                                      tag_field.character_set)

    if tag_field is not None and tag_field.pad_char is not None:
        if field.pad_char is not None:
            raise _pad_conflict(field)
        value = strip_pad_char(value, tag_field.pad_dir, tag_field.pad_char)
    elif field.pad_char is not None:
        value = apply_pad_char(value, field.pad_dir, field.pad_char,
                               field.length)

    if field.compaction:
        bits = string_to_binary(value, field.compaction)
    else:
        if tag_field is not None:
            validator.check_range(field.name, value,
                                  tag_field.decimal_minimum,
                                  tag_field.decimal_maximum)
        try:
            bits = dec2bin(value)
        except ValueError:
            raise FieldValueError(
                'Field {} ({!r}) is not a decimal value'.format(field.name,
                                                                value))

    if field.bit_length is not None:
        if field.bit_length == 0:
            return ''
        if len(bits) > field.bit_length:
            raise BitLengthOverflowError(
                'Field {} needs {} bits but only {} are '
                'allowed'.format(field.name, len(bits), field.bit_length))
        padding = '0' * (field.bit_length - len(bits))
        if (field.bit_pad_dir or LEFT) == RIGHT:
            bits = bits + padding
        else:
            bits = padding + bits
    return bits


def encode_binary_fields(option, context, tag_option, validator):
    """Return the bit string of every field of a binary option."""
    encoded = {}
    for field in option.fields:
        try:
            value = context[field.name]
        except KeyError:
            raise MissingFieldError(
                'No value for field {} of binary option {}'.format(
                    field.name, option.key))
        bits = encode_binary_field(field, value,
                                   _counterpart(tag_option, field.name),
                                   validator)
        logger.debugfast('Field %s = %r -> %s', field.name, value, bits)
        encoded[field.name] = bits
    return encoded


def validate_fields(option, context, validator):
    """Check the values of a non-binary output option's fields."""
    for field in option.fields:
        value = context.get(field.name)
        if value is not None:
            validator.check_field(field, value)
