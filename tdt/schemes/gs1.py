'''
GS1 schemes: SGTIN-64, SGTIN-96, SGTIN-198, SSCC-96, SGLN-96 and GRAI-96.

Partitioned binary formats (bits):
Header    Filter  Partition   Company Prefix  Reference   Trailer
8         3       3           20-40           see table   serial or reserved

Documentation here:
http://www.gs1.org/sites/default/files/docs/tds/TDS_1_9_Standard.pdf

One option is generated per company prefix length, keyed by that length.
'''

from ..model import (BINARY, LEGACY, ONS_HOSTNAME, PURE_IDENTITY, RIGHT,
                     TAG_ENCODING)
from .base import (DIGITS, NUMBER, binary_string, bits, extract_rules, field,
                   format_rules, level, number, option, padded_number, scheme)

OPTION_KEY = 'companyprefixlength'

FILTER_BITS = 3
PARTITION_BITS = 3

'''
Tables defining partition sizes:
partition: (company prefix bits, digits, reference bits, digits)
'''
SGTIN_PARTITION_MAP = {
    0: (40, 12, 4, 1),
    1: (37, 11, 7, 2),
    2: (34, 10, 10, 3),
    3: (30, 9, 14, 4),
    4: (27, 8, 17, 5),
    5: (24, 7, 20, 6),
    6: (20, 6, 24, 7)
}

SSCC_PARTITION_MAP = {
    0: (40, 12, 18, 5),
    1: (37, 11, 21, 6),
    2: (34, 10, 24, 7),
    3: (30, 9, 28, 8),
    4: (27, 8, 31, 9),
    5: (24, 7, 34, 10),
    6: (20, 6, 38, 11)
}

SGLN_PARTITION_MAP = {
    0: (40, 12, 1, 0),
    1: (37, 11, 4, 1),
    2: (34, 10, 7, 2),
    3: (30, 9, 11, 3),
    4: (27, 8, 14, 4),
    5: (24, 7, 17, 5),
    6: (20, 6, 21, 6)
}

GRAI_PARTITION_MAP = {
    0: (40, 12, 4, 0),
    1: (37, 11, 7, 1),
    2: (34, 10, 10, 2),
    3: (30, 9, 14, 3),
    4: (27, 8, 17, 4),
    5: (24, 7, 20, 5),
    6: (20, 6, 24, 6)
}

# SGTIN-64 has no partition: the company prefix travels as a 14 bit index
# into the company prefix table, so every length shares one layout.
SGTIN_64_INDEX_BITS = 14
SGTIN_64_ITEMREF_BITS = 20
SGTIN_64_SERIAL_BITS = 25
SGTIN_64_OPTIONS = {
    length: (None, length, SGTIN_64_ITEMREF_BITS, 13 - length)
    for length in range(6, 13)
}

SSCC_RESERVED_BITS = 24

SGTIN_198_CHARACTERS = '[!%-?A-Z_a-z"]'
SGTIN_198_SERIAL = SGTIN_198_CHARACTERS + '{1,20}'


def numeric_serial(bit_length):
    return {
        'bit_length': bit_length,
        'pattern': NUMBER,
        'binary': {},
        'text': {'character_set': DIGITS, 'decimal_minimum': '0',
                 'decimal_maximum': str((1 << bit_length) - 1)},
    }


def alphanumeric_serial(bit_length):
    return {
        'bit_length': bit_length,
        'pattern': '(' + SGTIN_198_SERIAL + ')',
        'binary': {'compaction': '7-bit', 'bit_pad_dir': RIGHT},
        'text': {'character_set': SGTIN_198_CHARACTERS + '*'},
    }


def _options(partitions):
    return sorted(partitions.items())


def partitioned_binary_level(header, partitions, reference, serial=None,
                             reserved=0):
    options = []
    for partition, (cp_bits, cp_digits, ref_bits, _) in _options(partitions):
        pbits = binary_string(partition, PARTITION_BITS)
        pattern = '^{}([01]{{{}}}){}([01]{{{}}})([01]{{{}}})'.format(
            header, FILTER_BITS, pbits, cp_bits, ref_bits)
        grammar = "'{}' filter '{}' companyprefix {}".format(header, pbits,
                                                              reference)
        fields = [bits('filter', 1, FILTER_BITS),
                  bits('companyprefix', 2, cp_bits),
                  bits(reference, 3, ref_bits)]
        if serial:
            pattern += '([01]{{{}}})'.format(serial['bit_length'])
            grammar += ' serial'
            fields.append(bits('serial', 4, serial['bit_length'],
                               **serial['binary']))
        if reserved:
            pattern += '0' * reserved
            grammar += " '{}'".format('0' * reserved)
        options.append(option(cp_digits, pattern + '$', grammar, fields))
    return level(BINARY, header, options)


def uri_level(level_type, prefix, partitions, reference, serial=None):
    """TAG_ENCODING (with filter) or PURE_IDENTITY level of a GS1 scheme.

    prefix is the URN up to, not including, the last colon.
    """
    options = []
    for _, (cp_bits, cp_digits, ref_bits, ref_digits) in _options(partitions):
        groups = []
        fields = []
        if level_type == TAG_ENCODING:
            groups.append('([0-7])')
            fields.append(number('filter', 1, 7, length=1))
        groups.append('([0-9]{{{}}})'.format(cp_digits))
        fields.append(padded_number('companyprefix', len(fields) + 1,
                                    cp_digits, cp_bits))
        groups.append('([0-9]{{{}}})'.format(ref_digits))
        fields.append(padded_number(reference, len(fields) + 1, ref_digits,
                                    ref_bits))
        if serial:
            groups.append(serial['pattern'])
            fields.append(field('serial', len(fields) + 1, **serial['text']))
        names = [f['name'] for f in fields]
        pattern = '^' + prefix + ':' + r'\.'.join(groups) + '$'
        grammar = "'{}:' ".format(prefix) + " '.' ".join(names)
        options.append(option(cp_digits, pattern, grammar, fields))
    return level(level_type, prefix, options)


def legacy_level(prefix, partitions, pattern, grammar, fields, rules):
    options = [option(cp_digits, pattern, grammar, fields)
               for _, (_, cp_digits, _, _) in _options(partitions)]
    return level(LEGACY, prefix, options, rules)


def sgtin_legacy_level(partitions, serial):
    return legacy_level(
        'gtin=', partitions,
        '^gtin=([0-9]{14});serial=' + serial['pattern'] + '$',
        "'gtin=' gtin ';serial=' serial",
        [field('gtin', 1, length=14, character_set=DIGITS),
         field('serial', 2, **serial['text'])],
        extract_rules(
            ('indicatordigit', 'SUBSTR(gtin,0,1)'),
            ('gtinbody', 'SUBSTR(gtin,1,12)'),
            ('companyprefix', 'SUBSTR(gtinbody,0,companyprefixlength)'),
            ('itemrefremainder', 'SUBSTR(gtinbody,companyprefixlength)'),
            ('itemref', 'CONCAT(indicatordigit,itemrefremainder)'),
        ) + format_rules(
            ('indicatordigit', 'SUBSTR(itemref,0,1)'),
            ('itemrefremainder', 'SUBSTR(itemref,1)'),
            ('gtinbody',
             'CONCAT(indicatordigit,companyprefix,itemrefremainder)'),
            ('checkdigit', 'GS1CHECKSUM(gtinbody)'),
            ('gtin', 'CONCAT(gtinbody,checkdigit)'),
        ))


def sgtin_ons_level(partitions):
    options = []
    for _, (cp_bits, cp_digits, ref_bits, ref_digits) in _options(partitions):
        options.append(option(
            cp_digits,
            r'^([0-9]{{{}}})\.([0-9]{{{}}})\.sgtin\.id\.onsepc\.com$'.format(
                ref_digits, cp_digits),
            "itemref '.' companyprefix '.sgtin.id.onsepc.com'",
            [padded_number('itemref', 1, ref_digits, ref_bits),
             padded_number('companyprefix', 2, cp_digits, cp_bits)]))
    return level(ONS_HOSTNAME, None, options)


def sgtin_64():
    serial = numeric_serial(SGTIN_64_SERIAL_BITS)
    binary_options = [
        option(cp_digits,
               '^10([01]{{{}}})([01]{{{}}})([01]{{{}}})([01]{{{}}})$'.format(
                   FILTER_BITS, SGTIN_64_INDEX_BITS, SGTIN_64_ITEMREF_BITS,
                   SGTIN_64_SERIAL_BITS),
               "'10' filter companyprefixindex itemref serial",
               [bits('filter', 1, FILTER_BITS),
                bits('companyprefixindex', 2, SGTIN_64_INDEX_BITS),
                bits('itemref', 3, SGTIN_64_ITEMREF_BITS),
                bits('serial', 4, SGTIN_64_SERIAL_BITS)])
        for _, (_, cp_digits, _, _) in _options(SGTIN_64_OPTIONS)]
    binary_rules = extract_rules(
        ('companyprefix', 'TABLELOOKUP(companyprefixindex,tdt64bitcpi,'
                          'companyprefixindex,companyprefix)'),
    ) + format_rules(
        ('companyprefixindex', 'TABLELOOKUP(companyprefix,tdt64bitcpi,'
                               'companyprefix,companyprefixindex)'),
    )
    return scheme('SGTIN-64', 64, OPTION_KEY, [
        level(BINARY, '10', binary_options, binary_rules),
        uri_level(TAG_ENCODING, 'urn:epc:tag:sgtin-64', SGTIN_64_OPTIONS,
                  'itemref', serial),
        uri_level(PURE_IDENTITY, 'urn:epc:id:sgtin', SGTIN_64_OPTIONS,
                  'itemref', serial),
        sgtin_legacy_level(SGTIN_64_OPTIONS, serial),
    ])


def sgtin_96():
    serial = numeric_serial(38)
    return scheme('SGTIN-96', 96, OPTION_KEY, [
        partitioned_binary_level('00110000', SGTIN_PARTITION_MAP, 'itemref',
                                 serial),
        uri_level(TAG_ENCODING, 'urn:epc:tag:sgtin-96', SGTIN_PARTITION_MAP,
                  'itemref', serial),
        uri_level(PURE_IDENTITY, 'urn:epc:id:sgtin', SGTIN_PARTITION_MAP,
                  'itemref', serial),
        sgtin_legacy_level(SGTIN_PARTITION_MAP, serial),
        sgtin_ons_level(SGTIN_PARTITION_MAP),
    ])


def sgtin_198():
    serial = alphanumeric_serial(140)
    return scheme('SGTIN-198', 198, OPTION_KEY, [
        partitioned_binary_level('00110110', SGTIN_PARTITION_MAP, 'itemref',
                                 serial),
        uri_level(TAG_ENCODING, 'urn:epc:tag:sgtin-198', SGTIN_PARTITION_MAP,
                  'itemref', serial),
        uri_level(PURE_IDENTITY, 'urn:epc:id:sgtin', SGTIN_PARTITION_MAP,
                  'itemref', serial),
        sgtin_legacy_level(SGTIN_PARTITION_MAP, serial),
    ])


def sscc_96():
    return scheme('SSCC-96', 96, OPTION_KEY, [
        partitioned_binary_level('00110001', SSCC_PARTITION_MAP, 'serialref',
                                 reserved=SSCC_RESERVED_BITS),
        uri_level(TAG_ENCODING, 'urn:epc:tag:sscc-96', SSCC_PARTITION_MAP,
                  'serialref'),
        uri_level(PURE_IDENTITY, 'urn:epc:id:sscc', SSCC_PARTITION_MAP,
                  'serialref'),
        legacy_level(
            'sscc=', SSCC_PARTITION_MAP,
            '^sscc=([0-9]{18})$',
            "'sscc=' sscc",
            [field('sscc', 1, length=18, character_set=DIGITS)],
            extract_rules(
                ('extensiondigit', 'SUBSTR(sscc,0,1)'),
                ('ssccbody', 'SUBSTR(sscc,1,16)'),
                ('companyprefix', 'SUBSTR(ssccbody,0,companyprefixlength)'),
                ('serialrefremainder',
                 'SUBSTR(ssccbody,companyprefixlength)'),
                ('serialref', 'CONCAT(extensiondigit,serialrefremainder)'),
            ) + format_rules(
                ('extensiondigit', 'SUBSTR(serialref,0,1)'),
                ('serialrefremainder', 'SUBSTR(serialref,1)'),
                ('ssccbody',
                 'CONCAT(extensiondigit,companyprefix,serialrefremainder)'),
                ('checkdigit', 'GS1CHECKSUM(ssccbody)'),
                ('sscc', 'CONCAT(ssccbody,checkdigit)'),
            )),
    ])


def sgln_96():
    serial = numeric_serial(41)
    return scheme('SGLN-96', 96, OPTION_KEY, [
        partitioned_binary_level('00110010', SGLN_PARTITION_MAP,
                                 'locationref', serial),
        uri_level(TAG_ENCODING, 'urn:epc:tag:sgln-96', SGLN_PARTITION_MAP,
                  'locationref', serial),
        uri_level(PURE_IDENTITY, 'urn:epc:id:sgln', SGLN_PARTITION_MAP,
                  'locationref', serial),
        legacy_level(
            'gln=', SGLN_PARTITION_MAP,
            '^gln=([0-9]{13});serial=' + serial['pattern'] + '$',
            "'gln=' gln ';serial=' serial",
            [field('gln', 1, length=13, character_set=DIGITS),
             field('serial', 2, **serial['text'])],
            extract_rules(
                ('glnbody', 'SUBSTR(gln,0,12)'),
                ('companyprefix', 'SUBSTR(glnbody,0,companyprefixlength)'),
                ('locationref', 'SUBSTR(glnbody,companyprefixlength)'),
            ) + format_rules(
                ('glnbody', 'CONCAT(companyprefix,locationref)'),
                ('checkdigit', 'GS1CHECKSUM(glnbody)'),
                ('gln', 'CONCAT(glnbody,checkdigit)'),
            )),
    ])


def grai_96():
    serial = numeric_serial(38)
    return scheme('GRAI-96', 96, OPTION_KEY, [
        partitioned_binary_level('00110011', GRAI_PARTITION_MAP, 'assettype',
                                 serial),
        uri_level(TAG_ENCODING, 'urn:epc:tag:grai-96', GRAI_PARTITION_MAP,
                  'assettype', serial),
        uri_level(PURE_IDENTITY, 'urn:epc:id:grai', GRAI_PARTITION_MAP,
                  'assettype', serial),
        legacy_level(
            'grai=', GRAI_PARTITION_MAP,
            '^grai=0([0-9]{12})([0-9])' + serial['pattern'] + '$',
            "'grai=0' graibody checkdigit serial",
            [field('graibody', 1, length=12, character_set=DIGITS),
             field('checkdigit', 2, length=1, character_set=DIGITS),
             field('serial', 3, **serial['text'])],
            extract_rules(
                ('companyprefix', 'SUBSTR(graibody,0,companyprefixlength)'),
                ('assettype', 'SUBSTR(graibody,companyprefixlength)'),
            ) + format_rules(
                ('graibody', 'CONCAT(companyprefix,assettype)'),
                ('checkdigit', 'GS1CHECKSUM(graibody)'),
            )),
    ])


GS1_DEFINITIONS = [sgtin_64(), sgtin_96(), sgtin_198(), sscc_96(), sgln_96(),
                   grai_96()]
