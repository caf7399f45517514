"""Build the scheme model from definition documents.

A definition document is a plain mapping describing one scheme:

    {'name': 'GID-96', 'tag_length': 96, 'option_key': '1',
     'levels': [{'type': 'BINARY', 'prefix_match': '00110101',
                 'options': [{'option_key': '1', 'pattern': ...,
                              'grammar': ..., 'fields': [...]}],
                 'rules': [...]}, ...]}

Documents come from :mod:`tdt.schemes` or from TDT XML files read by
:func:`parse_definition`.
"""

from xml.etree import ElementTree

from .engine import CompanyPrefixTable
from .log import get_logger
from .model import (COMPACTIONS, RULE_TYPES, Field, Level, Option, Rule,
                    Scheme)
from .rules import parse_function
from .tdt_errors import SchemeDefinitionError
from .util import pad_direction

logger = get_logger(__name__)

# XML attribute name -> document key
_SCHEME_ATTRIBUTES = {
    'name': 'name',
    'tagLength': 'tag_length',
    'optionKey': 'option_key',
}
_LEVEL_ATTRIBUTES = {
    'type': 'type',
    'prefixMatch': 'prefix_match',
}
_OPTION_ATTRIBUTES = {
    'optionKey': 'option_key',
    'pattern': 'pattern',
    'grammar': 'grammar',
}
_FIELD_ATTRIBUTES = {
    'seq': 'seq',
    'name': 'name',
    'length': 'length',
    'bitLength': 'bit_length',
    'padChar': 'pad_char',
    'padDir': 'pad_dir',
    'bitPadDir': 'bit_pad_dir',
    'compaction': 'compaction',
    'characterSet': 'character_set',
    'decimalMinimum': 'decimal_minimum',
    'decimalMaximum': 'decimal_maximum',
}
_RULE_ATTRIBUTES = {
    'type': 'type',
    'seq': 'seq',
    'newFieldName': 'new_field_name',
    'function': 'function',
    'tableURL': 'table_url',
    'tableXPath': 'table_xpath',
}


def _required(doc, key, what):
    try:
        return doc[key]
    except KeyError:
        raise SchemeDefinitionError('{} is missing {!r}'.format(what, key))


def _int_or_none(value, what):
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise SchemeDefinitionError('{} is not an integer: {!r}'.format(
            what, value))


def build_field(doc):
    name = _required(doc, 'name', 'field')
    compaction = doc.get('compaction')
    if compaction is not None and compaction not in COMPACTIONS:
        raise SchemeDefinitionError(
            'field {} has unknown compaction {}'.format(name, compaction))
    try:
        pad_dir = pad_direction(doc.get('pad_dir'))
        bit_pad_dir = pad_direction(doc.get('bit_pad_dir'))
    except ValueError as err:
        raise SchemeDefinitionError('field {}: {}'.format(name, err))
    return Field(
        name=name,
        seq=_int_or_none(_required(doc, 'seq', 'field ' + name),
                         'seq of field ' + name),
        length=_int_or_none(doc.get('length'), 'length of field ' + name),
        bit_length=_int_or_none(doc.get('bit_length'),
                                'bitLength of field ' + name),
        pad_char=doc.get('pad_char'),
        pad_dir=pad_dir,
        bit_pad_dir=bit_pad_dir,
        compaction=compaction,
        character_set=doc.get('character_set'),
        decimal_minimum=doc.get('decimal_minimum'),
        decimal_maximum=doc.get('decimal_maximum'))


def build_rule(doc):
    function = _required(doc, 'function', 'rule')
    rule_type = _required(doc, 'type', 'rule ' + function).upper()
    if rule_type not in RULE_TYPES:
        raise SchemeDefinitionError('rule {} has unknown type {}'.format(
            function, rule_type))
    return Rule(seq=_int_or_none(_required(doc, 'seq', 'rule ' + function),
                                 'seq of rule ' + function),
                type=rule_type,
                function=function,
                new_field_name=_required(doc, 'new_field_name',
                                         'rule ' + function),
                call=parse_function(function),
                table_url=doc.get('table_url'),
                table_xpath=doc.get('table_xpath'))


def build_option(doc):
    key = str(_required(doc, 'option_key', 'option'))
    return Option(key,
                  _required(doc, 'pattern', 'option ' + key),
                  _required(doc, 'grammar', 'option ' + key),
                  [build_field(field) for field in doc.get('fields', ())])


def build_level(doc):
    level_type = _required(doc, 'type', 'level').upper()
    return Level(level_type,
                 doc.get('prefix_match') or None,
                 [build_option(option) for option in doc.get('options', ())],
                 [build_rule(rule) for rule in doc.get('rules', ())])


def build_scheme(doc):
    name = _required(doc, 'name', 'scheme')
    tag_length = _int_or_none(_required(doc, 'tag_length', 'scheme ' + name),
                              'tagLength of scheme ' + name)
    scheme = Scheme(name, tag_length,
                    _required(doc, 'option_key', 'scheme ' + name),
                    [build_level(level) for level in doc.get('levels', ())])
    logger.debugfast('Built scheme %s with levels %s', name,
                     ', '.join(level.type for level in scheme.levels))
    return scheme


def build_schemes(docs):
    return [build_scheme(doc) for doc in docs]


def _local_name(element):
    return element.tag.rsplit('}', 1)[-1]


def _children(element, name):
    return [child for child in element if _local_name(child) == name]


def _attributes(element, names):
    return {key: element.get(attr) for attr, key in names.items()
            if element.get(attr) is not None}


def _parse(source):
    try:
        return ElementTree.parse(source).getroot()
    except ElementTree.ParseError as err:
        raise SchemeDefinitionError('Cannot parse {}: {}'.format(
            getattr(source, 'name', source), err))


def parse_definition(source):
    """Read a TDT XML definition file into definition documents.

    source is a file name or a file object. Element names are matched
    without their namespace.
    """
    root = _parse(source)
    docs = []
    for scheme_el in root.iter():
        if _local_name(scheme_el) != 'scheme':
            continue
        doc = _attributes(scheme_el, _SCHEME_ATTRIBUTES)
        doc['levels'] = []
        for level_el in _children(scheme_el, 'level'):
            level = _attributes(level_el, _LEVEL_ATTRIBUTES)
            level['options'] = []
            for option_el in _children(level_el, 'option'):
                option = _attributes(option_el, _OPTION_ATTRIBUTES)
                option['fields'] = [_attributes(f, _FIELD_ATTRIBUTES)
                                    for f in _children(option_el, 'field')]
                level['options'].append(option)
            level['rules'] = [_attributes(r, _RULE_ATTRIBUTES)
                              for r in _children(level_el, 'rule')]
            doc['levels'].append(level)
        docs.append(doc)
    if not docs:
        raise SchemeDefinitionError('No scheme found in {}'.format(
            getattr(source, 'name', source)))
    return docs


def load_definitions(paths):
    docs = []
    for path in paths:
        logger.info('Loading scheme definitions from %s', path)
        docs.extend(parse_definition(path))
    return docs


def parse_company_prefix_table(source):
    """Read a GEPC64Table XML document into a CompanyPrefixTable."""
    root = _parse(source)
    table = CompanyPrefixTable()
    for entry in root.iter():
        if _local_name(entry) != 'entry':
            continue
        index = entry.get('index')
        company_prefix = entry.get('companyPrefix')
        if index is None or company_prefix is None:
            raise SchemeDefinitionError(
                'GEPC64Table entry lacks index or companyPrefix')
        table.add(index, company_prefix)
    logger.info('Loaded %d company prefix index entries', len(table))
    return table
