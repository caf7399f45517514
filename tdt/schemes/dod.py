'''
US Department of Defense identifiers, USDOD-64 and USDOD-96.

Formats (bits):
          Header  Filter  CAGE/DoDAAC         Serial
USDOD-64  8       2       30 (5 x 6-bit)      24
USDOD-96  8       4       48 (6 x 8-bit)      36

USDOD-96 carries 6 characters; 5 character CAGE codes are padded on the
left with a space.
'''

from ..model import BINARY, LEFT, LEGACY, PURE_IDENTITY, TAG_ENCODING
from .base import NUMBER, bits, field, level, number, option, scheme

OPTION_KEY = '1'

# CAGE codes and DoDAACs never use I and O
CAGE_CHARACTERS = '[0-9A-HJ-NP-Z]'


def _cage(seq, length=None):
    return field('cageordodaac', seq, length=length,
                 character_set=CAGE_CHARACTERS + '*')


def _usdod(name, tag_length, header, filter_bits, cage_chars, cage_binary,
           serial_bits):
    tag_prefix = 'urn:epc:tag:' + name.lower()
    cage = '({}{{{}}})'.format(CAGE_CHARACTERS, cage_chars)
    max_filter = (1 << filter_bits) - 1
    max_serial = (1 << serial_bits) - 1
    binary = option(
        OPTION_KEY,
        '^{}([01]{{{}}})([01]{{{}}})([01]{{{}}})$'.format(
            header, filter_bits, cage_binary['bit_length'], serial_bits),
        "'{}' filter cageordodaac serial".format(header),
        [bits('filter', 1, filter_bits),
         field('cageordodaac', 2, **cage_binary),
         bits('serial', 3, serial_bits)])
    tag = option(
        OPTION_KEY,
        r'^{}:([0-9]+)\.{}\.{}$'.format(tag_prefix, cage, NUMBER),
        "'{}:' filter '.' cageordodaac '.' serial".format(tag_prefix),
        [number('filter', 1, max_filter),
         _cage(2),
         number('serial', 3, max_serial)])
    pure = option(
        OPTION_KEY,
        r'^urn:epc:id:usdod:{}\.{}$'.format(cage, NUMBER),
        "'urn:epc:id:usdod:' cageordodaac '.' serial",
        [_cage(1), number('serial', 2, max_serial)])
    legacy = option(
        OPTION_KEY,
        '^cageordodaac=({}{{5,6}});serial={}$'.format(CAGE_CHARACTERS,
                                                      NUMBER),
        "'cageordodaac=' cageordodaac ';serial=' serial",
        [_cage(1), number('serial', 2, max_serial)])
    return scheme(name, tag_length, OPTION_KEY, [
        level(BINARY, header, [binary]),
        level(TAG_ENCODING, tag_prefix, [tag]),
        level(PURE_IDENTITY, 'urn:epc:id:usdod', [pure]),
        level(LEGACY, 'cageordodaac=', [legacy]),
    ])


def usdod_64():
    return _usdod('USDOD-64', 64, '11001110', 2, 5,
                  {'bit_length': 30, 'compaction': '6-bit'}, 24)


def usdod_96():
    return _usdod('USDOD-96', 96, '00101111', 4, '5,6',
                  {'bit_length': 48, 'compaction': '8-bit', 'length': 6,
                   'pad_char': ' ', 'pad_dir': LEFT}, 36)


DOD_DEFINITIONS = [usdod_64(), usdod_96()]
