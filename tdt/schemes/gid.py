'''
General Identifier, GID-96.

Format (bits):
Header    General Manager   Object Class    Serial
8         28                24              36
'''

from ..model import BINARY, LEGACY, PURE_IDENTITY, TAG_ENCODING
from .base import NUMBER, bits, level, number, option, scheme

# GID has a single option, named after the option key itself
OPTION_KEY = '1'

GID_96_FIELDS = (
    ('generalmanager', 28),
    ('objectclass', 24),
    ('serial', 36),
)


def _text_fields():
    return [number(name, seq, (1 << bit_length) - 1)
            for seq, (name, bit_length) in enumerate(GID_96_FIELDS, 1)]


def _uri_option(prefix):
    names = [name for name, _ in GID_96_FIELDS]
    return option(OPTION_KEY,
                  '^' + prefix + ':' + r'\.'.join([NUMBER] * len(names)) +
                  '$',
                  "'{}:' ".format(prefix) + " '.' ".join(names),
                  _text_fields())


def gid_96():
    binary = option(
        OPTION_KEY,
        '^00110101' + ''.join('([01]{{{}}})'.format(bit_length)
                              for _, bit_length in GID_96_FIELDS) + '$',
        "'00110101' " + ' '.join(name for name, _ in GID_96_FIELDS),
        [bits(name, seq, bit_length)
         for seq, (name, bit_length) in enumerate(GID_96_FIELDS, 1)])
    legacy = option(
        OPTION_KEY,
        '^' + ';'.join('{}={}'.format(name, NUMBER)
                       for name, _ in GID_96_FIELDS) + '$',
        " ';' ".join("'{}=' {}".format(name, name)
                     for name, _ in GID_96_FIELDS),
        _text_fields())
    return scheme('GID-96', 96, OPTION_KEY, [
        level(BINARY, '00110101', [binary]),
        level(TAG_ENCODING, 'urn:epc:tag:gid-96',
              [_uri_option('urn:epc:tag:gid-96')]),
        level(PURE_IDENTITY, 'urn:epc:id:gid',
              [_uri_option('urn:epc:id:gid')]),
        level(LEGACY, 'generalmanager=', [legacy]),
    ])


GID_DEFINITIONS = [gid_96()]
