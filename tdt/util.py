import re

from .model import LEFT, RIGHT

_DECIMAL_RE = re.compile(r'[0-9]+')
_BINARY_RE = re.compile(r'[01]+')
_HEX_RE = re.compile(r'[0-9A-Fa-f]+')


def is_decimal(text):
    return bool(_DECIMAL_RE.fullmatch(text))


def bin2dec(binary):
    """Read a bit string as an unsigned integer, return it as decimal text.

    >>> bin2dec('1001000010001000')
    '37000'
    """
    if not binary:
        return '0'
    if not _BINARY_RE.fullmatch(binary):
        raise ValueError('Not a binary string: {!r}'.format(binary))
    return str(int(binary, 2))


def dec2bin(decimal):
    """Render decimal text as an unsigned bit string without padding."""
    if not decimal:
        return '0'
    if not is_decimal(decimal):
        raise ValueError('Not a decimal string: {!r}'.format(decimal))
    return '{:b}'.format(int(decimal))


def hex2bin(hexstr):
    """Convert hex to bits, keeping 4 bits per hex digit.

    >>> hex2bin('0F')
    '00001111'
    """
    if not hexstr:
        return ''
    if not _HEX_RE.fullmatch(hexstr):
        raise ValueError('Not a hex string: {!r}'.format(hexstr))
    return '{:0{}b}'.format(int(hexstr, 16), 4 * len(hexstr))


def bin2hex(binary):
    """Convert bits to uppercase hex, one digit per started nibble."""
    if not binary:
        return ''
    if not _BINARY_RE.fullmatch(binary):
        raise ValueError('Not a binary string: {!r}'.format(binary))
    return '{:0{}X}'.format(int(binary, 2), (len(binary) + 3) // 4)


def apply_pad_char(bare, direction, pad_char, required_length):
    """Pad bare at the given edge up to required_length characters.

    Values already at (or over) the required length are returned as is.
    """
    if direction is None or pad_char is None or required_length is None:
        return bare
    padding = pad_char * (required_length - len(bare))
    if direction == RIGHT:
        return bare + padding
    return padding + bare


def strip_pad_char(padded, direction, pad_char):
    """Remove successive pad_char at the given edge.

    A value made only of pad characters collapses to a single one, so
    that e.g. an all-zero company prefix still reads as '0'.
    """
    if direction is None or pad_char is None:
        return padded
    if padded and not padded.strip(pad_char):
        return pad_char
    if direction == RIGHT:
        return padded.rstrip(pad_char)
    return padded.lstrip(pad_char)


def strip_binary_padding(bits, direction, width=0):
    """Strip zero bits added at the given edge of a binary field.

    With width >= 4 (a compaction width), the result is the smallest
    multiple of width bits holding every 1 bit, counted from the edge
    opposite to the padding. With width 0 the zeros are stripped up to
    the nearest 1 bit. An all-zero field collapses to '0'.
    """
    if '1' not in bits:
        return '0'
    if direction == RIGHT:
        needed = bits.rindex('1') + 1
    else:
        needed = len(bits) - bits.index('1')
    if width >= 4:
        needed = (needed + width - 1) // width * width
    if direction == RIGHT:
        return bits[:needed]
    return bits[max(0, len(bits) - needed):]


def pad_direction(value):
    """Normalise a pad direction attribute (None stays None)."""
    if value is None:
        return None
    value = value.upper()
    if value not in (LEFT, RIGHT):
        raise ValueError('Invalid pad direction: {}'.format(value))
    return value


def atoi(text):
    return int(text) if text.isdigit() else text


def natural_keys(text):
    """Sort alphanumerics in a "natural" order
    Source: https://stackoverflow.com/questions/5967500/

    >>> sorted(['SGTIN-198', 'SGTIN-64'], key=natural_keys)
    ['SGTIN-64', 'SGTIN-198']
    """
    return [atoi(c) for c in re.split('([0-9]+)', text)]
