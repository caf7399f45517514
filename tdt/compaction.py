"""Fixed-width character compaction used by alphanumeric binary fields.

Each character is packed as its code point modulo 2**width; decoding
restores the printable range for the 5-bit (uppercase) and 6-bit
(alphanumeric) methods.
"""

from .tdt_errors import UnsupportedCompactionError


def _uppercase_five(value):
    return value + 64


def _alphanumeric_six(value):
    if value < 32:
        return value + 64
    return value


def _identity(value):
    return value


COMPACTIONS = {
    # method: (bits per character, decoded value -> code point)
    '5-bit': (5, _uppercase_five),
    '6-bit': (6, _alphanumeric_six),
    '7-bit': (7, _identity),
    '8-bit': (8, _identity),
}


def _lookup(compaction):
    try:
        return COMPACTIONS[compaction]
    except KeyError:
        raise UnsupportedCompactionError(
            'unsupported compaction method {}'.format(compaction))


def compaction_width(compaction):
    return _lookup(compaction)[0]


def string_to_binary(text, compaction):
    """Pack text into bits, width bits per character.

    >>> string_to_binary('1D', '6-bit')
    '110001000100'
    """
    width = _lookup(compaction)[0]
    modulus = 1 << width
    return ''.join('{:0{}b}'.format(ord(char) % modulus, width)
                   for char in text)


def binary_to_string(bits, compaction):
    """Unpack bits into text; bits should be a multiple of the width."""
    width, to_code_point = _lookup(compaction)
    chars = []
    for start in range(0, len(bits), width):
        chars.append(chr(to_code_point(int(bits[start:start + width], 2))))
    return ''.join(chars)
