"""EPC Tag Data Translation engine.

The engine converts an EPC between its representations (binary, tag
URI, pure identity URI, legacy GS1 element strings and ONS hostname)
using the scheme definitions it was built with:

>>> engine = TDTEngine.builtin()
>>> engine.convert('gtin=00037000302414;serial=1041970',
...                {'taglength': '96', 'filter': '3',
...                 'companyprefixlength': '7'}, 'TAG_ENCODING')
'urn:epc:tag:sgtin-96:3.0037000.030241.1041970'
"""

from .codec import decode_fields, encode_binary_fields, validate_fields
from .grammar import URN_PREFIX, build_grammar, uri_unescape
from .log import get_logger
from .model import BINARY, LEGACY, PURE_IDENTITY, TAG_ENCODING
from .prefix_tree import PrefixTree
from .resolver import build_prefix_trees, find_prefix_match
from .rules import COMPANY_PREFIX_TABLE, process_rules
from .tdt_errors import (AmbiguousMatchError, NoMatchError,
                         SchemeDefinitionError, TableLookupError)
from . import util
from .validation import Validator

logger = get_logger(__name__)

COMPANY_PREFIX = 'companyprefix'
COMPANY_PREFIX_INDEX = 'companyprefixindex'
COMPANY_PREFIX_LENGTH = 'companyprefixlength'

# input levels whose option is identified by the pattern alone
SELF_DESCRIBING_LEVELS = (BINARY, TAG_ENCODING, PURE_IDENTITY)

# widest numeric serial of SGTIN-96; longer or alphanumeric serials need
# SGTIN-198
SGTIN96_SERIAL_BITS = 38


class CompanyPrefixTable(object):
    """Company prefixes known to the engine.

    Holds the 64-bit company prefix index table (index <-> company
    prefix, both directions) and a PrefixTree of known company prefixes
    used to infer the length of the prefix starting a GS1 key.
    """

    def __init__(self, entries=()):
        self._prefix_by_index = {}
        self._index_by_prefix = {}
        self._known = PrefixTree()
        for index, company_prefix in entries:
            self.add(index, company_prefix)

    def add(self, index, company_prefix):
        index = str(int(index))
        self._prefix_by_index[index] = company_prefix
        self._index_by_prefix[company_prefix] = index
        self.add_known(company_prefix)

    def add_known(self, company_prefix):
        self._known.insert(company_prefix, company_prefix)

    def company_prefix(self, index):
        return self._prefix_by_index.get(str(int(index)))

    def index(self, company_prefix):
        return self._index_by_prefix.get(company_prefix)

    def lookup(self, in_col, out_col, value):
        if (in_col, out_col) == (COMPANY_PREFIX_INDEX, COMPANY_PREFIX):
            result = self.company_prefix(value) if util.is_decimal(value) \
                else None
        elif (in_col, out_col) == (COMPANY_PREFIX, COMPANY_PREFIX_INDEX):
            result = self.index(value)
        else:
            raise TableLookupError(
                'Cannot look up {} from {} in the company prefix '
                'table'.format(out_col, in_col))
        if result is None:
            raise TableLookupError(
                'No {} for {} {} in the company prefix table'.format(
                    out_col, in_col, value))
        return result

    def prefix_length(self, digits):
        """Length of the longest known company prefix starting digits."""
        found = self._known.longest(digits)
        if not found:
            return None
        return len(found[0])

    def __len__(self):
        return len(self._prefix_by_index)


class TDTEngine(object):
    """Translate EPCs between representation levels.

    :param schemes: iterable of :class:`tdt.model.Scheme`
    :param company_prefix_table: :class:`CompanyPrefixTable` serving the
        tdt64bitcpi table of the 64-bit schemes
    :param tables: other TABLELOOKUP tables, as a mapping of table name
        to a list of rows (dicts of column name to value)
    :param strict: raise character set and range violations instead of
        logging them
    """

    def __init__(self, schemes, company_prefix_table=None, tables=None,
                 strict=False):
        self.schemes = tuple(sorted(schemes,
                                    key=lambda s: util.natural_keys(s.name)))
        self.company_prefixes = (company_prefix_table
                                 if company_prefix_table is not None
                                 else CompanyPrefixTable())
        self.tables = dict(tables or {})
        self.validator = Validator(strict)
        self._trees = build_prefix_trees(self.schemes)
        logger.debugfast('Loaded schemes: %s',
                         ', '.join(s.name for s in self.schemes))

    @classmethod
    def from_definitions(cls, definitions, **kwargs):
        from .loader import build_schemes
        return cls(build_schemes(definitions), **kwargs)

    @classmethod
    def builtin(cls, **kwargs):
        from .schemes import BUILTIN_DEFINITIONS
        return cls.from_definitions(BUILTIN_DEFINITIONS, **kwargs)

    @property
    def strict(self):
        return self.validator.strict

    def scheme(self, name):
        for scheme in self.schemes:
            if scheme.name == name:
                return scheme
        return None

    def convert(self, value, params, output_level):
        """Convert value to output_level.

        params carries the extra parameters some conversions need, such
        as 'taglength', 'filter' and 'companyprefixlength'. It is not
        modified.
        """
        params = params or {}
        return self.convert_from_level(value, None, params.get('taglength'),
                                       params, output_level)

    def convert_from_level(self, value, input_level, tag_length, params,
                           output_level):
        """Convert value, searching only input_level (None: every level)."""
        context = {key: str(val) for key, val in (params or {}).items()}
        if value.startswith(URN_PREFIX):
            value = uri_unescape(value)

        scheme, in_level, context['taglength'] = find_prefix_match(
            self._trees, value, tag_length, input_level)
        option = self._select_option(scheme, in_level, value, context)
        context[scheme.option_key] = option.key
        logger.debugfast('Converting %r from %s %s option %s to %s', value,
                         scheme.name, in_level.type, option.key,
                         output_level)

        context.update(decode_fields(option, option.match(value),
                                     in_level.type == BINARY,
                                     self._tag_option(scheme, option.key),
                                     self.validator))
        process_rules(context, in_level.extract_rules, self._table_lookup)

        out_level = scheme.level(output_level)
        if out_level is None:
            raise SchemeDefinitionError(
                'Scheme {} has no {} level'.format(scheme.name,
                                                   output_level))
        out_option = out_level.option(option.key)
        if out_option is None:
            raise SchemeDefinitionError(
                'Level {} of scheme {} has no option {}'.format(
                    output_level, scheme.name, option.key))
        process_rules(context, out_level.format_rules, self._table_lookup)

        if output_level == BINARY:
            encoded = encode_binary_fields(
                out_option, context, self._tag_option(scheme, option.key),
                self.validator)
            result = build_grammar(out_option.grammar,
                                   dict(context, **encoded), output_level)
        else:
            validate_fields(out_option, context, self.validator)
            result = build_grammar(out_option.grammar, context, output_level)
        logger.debugfast('Converted %r to %r', value, result)
        return result

    def _select_option(self, scheme, level, value, context):
        requested = context.get(scheme.option_key)
        if requested is not None:
            requested = str(requested)
        if level.type in SELF_DESCRIBING_LEVELS or requested is None:
            candidates = level.options
        else:
            candidates = [o for o in level.options if o.key == requested]

        matching = [o for o in candidates if o.match(value)]
        if not matching:
            raise NoMatchError(
                'No option of {} {} matched the input value {!r}'.format(
                    scheme.name, level.type, value))
        if len(matching) > 1:
            settled = [o for o in matching if o.key == requested]
            if len(settled) != 1:
                raise AmbiguousMatchError(
                    'Options {} of {} {} all match {!r}; set {} to choose '
                    'one'.format(', '.join(o.key for o in matching),
                                 scheme.name, level.type, value,
                                 scheme.option_key))
            matching = settled
        return matching[0]

    def _tag_option(self, scheme, key):
        level = scheme.level(TAG_ENCODING)
        if level is None:
            return None
        return level.option(key)

    def _table_lookup(self, table, in_col, out_col, value):
        if table == COMPANY_PREFIX_TABLE:
            return self.company_prefixes.lookup(in_col, out_col, value)
        for row in self.tables.get(table, ()):
            if row.get(in_col) == value and out_col in row:
                return row[out_col]
        raise TableLookupError('No {} for {} {} in table {}'.format(
            out_col, in_col, value, table))

    # Auxiliary conversions

    @staticmethod
    def bin2dec(binary):
        return util.bin2dec(binary)

    @staticmethod
    def dec2bin(decimal):
        return util.dec2bin(decimal)

    @staticmethod
    def bin2hex(binary):
        return util.bin2hex(binary)

    @staticmethod
    def hex2bin(hexstr):
        return util.hex2bin(hexstr)

    def add_company_prefixes(self, stream):
        """Feed company prefixes, one per line, from a text or byte stream.

        A line 'index,companyprefix' adds an entry of the 64-bit company
        prefix index table; a line holding a single company prefix adds a
        known prefix. Blank lines and '#' comments are skipped.
        Returns the number of entries added.
        """
        count = 0
        for lineno, line in enumerate(stream, 1):
            if isinstance(line, bytes):
                line = line.decode('ascii')
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            parts = [part.strip() for part in line.split(',')]
            if not all(util.is_decimal(part) for part in parts[:2]):
                logger.warning('Skipping company prefix line %d: %r', lineno,
                               line)
                continue
            if len(parts) == 1:
                self.company_prefixes.add_known(parts[0])
            else:
                self.company_prefixes.add(parts[0], parts[1])
            count += 1
        logger.info('Added %d company prefix entries', count)
        return count

    # GS1 convenience conversions

    def _gcp_length(self, digits, gcp_length):
        if gcp_length is not None:
            return str(int(gcp_length))
        length = self.company_prefixes.prefix_length(digits)
        if length is None:
            raise NoMatchError(
                'No known company prefix starts {}; pass the company prefix '
                'length explicitly'.format(digits))
        logger.debugfast('Inferred company prefix length %d for %s', length,
                         digits)
        return str(length)

    @staticmethod
    def _sgtin_tag_length(serial):
        if (util.is_decimal(serial) and (serial == '0' or serial[0] != '0')
                and int(serial) < 1 << SGTIN96_SERIAL_BITS):
            return '96'
        return '198'

    @staticmethod
    def _legacy_elements(legacy):
        return dict(part.split('=', 1) for part in legacy.split(';'))

    def gtin_serial_to_pure_identity(self, gtin, serial, gcp_length=None):
        """
        >>> TDTEngine.builtin().gtin_serial_to_pure_identity(
        ...     '00037000302414', '1041970', 7)
        'urn:epc:id:sgtin:0037000.030241.1041970'
        """
        gtin = gtin.zfill(14)
        params = {
            'taglength': self._sgtin_tag_length(serial),
            COMPANY_PREFIX_LENGTH: self._gcp_length(gtin[1:13], gcp_length),
        }
        return self.convert('gtin={};serial={}'.format(gtin, serial), params,
                            PURE_IDENTITY)

    def pure_identity_to_gtin_serial(self, epc):
        """Return the (gtin, serial) pair of an SGTIN pure identity URI."""
        serial = uri_unescape(epc.rsplit('.', 1)[-1])
        legacy = self.convert(epc, {'taglength':
                                    self._sgtin_tag_length(serial)}, LEGACY)
        elements = self._legacy_elements(legacy)
        return elements['gtin'], elements['serial']

    def sscc_to_pure_identity(self, sscc, gcp_length=None):
        sscc = sscc.zfill(18)
        params = {
            'taglength': '96',
            COMPANY_PREFIX_LENGTH: self._gcp_length(sscc[1:17], gcp_length),
        }
        return self.convert('sscc=' + sscc, params, PURE_IDENTITY)

    def pure_identity_to_sscc(self, epc):
        legacy = self.convert(epc, {'taglength': '96'}, LEGACY)
        return self._legacy_elements(legacy)['sscc']

    def gln_serial_to_pure_identity(self, gln, serial, gcp_length=None):
        gln = gln.zfill(13)
        params = {
            'taglength': '96',
            COMPANY_PREFIX_LENGTH: self._gcp_length(gln[:12], gcp_length),
        }
        return self.convert('gln={};serial={}'.format(gln, serial), params,
                            PURE_IDENTITY)

    def binary_to_pure_identity(self, bits, params=None):
        """Convert a binary EPC to its pure identity URI.

        The 64-bit SGTIN options cannot be told apart from the bits alone;
        for those, params must carry companyprefixlength.
        """
        return self.convert_from_level(bits, BINARY, len(bits), params,
                                       PURE_IDENTITY)

    def hex_to_pure_identity(self, hexstr, params=None):
        """Convert a hex EPC to its pure identity URI.

        Hex digits hold a multiple of 4 bits, so EPCs of other bit lengths
        (SGTIN-198) carry up to 3 leading padding bits, which are dropped
        in turn until the bits match a scheme.
        """
        bits = util.hex2bin(hexstr)
        error = None
        for drop in range(4):
            try:
                return self.binary_to_pure_identity(bits[drop:], params)
            except NoMatchError as err:
                error = err
        raise error
