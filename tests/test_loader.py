import io
import logging
import os
import tempfile
import unittest

from tdt import BINARY, LEGACY, PURE_IDENTITY, TAG_ENCODING, TDTEngine
from tdt.loader import (build_scheme, build_schemes, load_definitions,
                        parse_company_prefix_table, parse_definition)
from tdt.schemes import BUILTIN_DEFINITIONS
from tdt.tdt_errors import (BitLengthOverflowError,
                            SchemeDefinitionConflictError,
                            SchemeDefinitionError, TableLookupError)

logLevel = logging.WARNING
logging.basicConfig(level=logLevel,
                    format='%(asctime)s %(name)s: %(levelname)s: %(message)s')

TOY_XML = b'''<?xml version="1.0" encoding="UTF-8"?>
<tdt:epcTagDataTranslation xmlns:tdt="urn:epcglobal:tdt:xsd:1"
                           version="1.0">
  <scheme name="TOY-8" optionKey="1" tagLength="8">
    <level type="BINARY" prefixMatch="1111">
      <option optionKey="1" pattern="^1111([01]{4})$" grammar="'1111' value">
        <field seq="1" name="value" bitLength="4" bitPadDir="LEFT"
               decimalMinimum="0" decimalMaximum="15" characterSet="[01]*"/>
      </option>
    </level>
    <level type="LEGACY" prefixMatch="toy=">
      <option optionKey="1" pattern="^toy=([0-9]+)$" grammar="'toy=' value">
        <field seq="1" name="value" characterSet="[0-9]*"/>
      </option>
    </level>
    <level type="PURE_IDENTITY" prefixMatch="urn:toy:">
      <option optionKey="1" pattern="^urn:toy:([a-z]+)"
              grammar="'urn:toy:' name '.' half">
        <field seq="1" name="name" characterSet="[a-z]*"/>
      </option>
      <rule type="EXTRACT" seq="1" newFieldName="value"
            function="TABLELOOKUP(name,toys,name,value)"/>
      <rule type="FORMAT" seq="2" newFieldName="half"
            function="DIVIDE(value,2)"/>
      <rule type="FORMAT" seq="1" newFieldName="name"
            function="TABLELOOKUP(value,toys,value,name)"/>
    </level>
  </scheme>
</tdt:epcTagDataTranslation>
'''

TOY_TABLES = {'toys': [{'name': 'seven', 'value': '7'},
                       {'name': 'three', 'value': '3'}]}

GEPC64_XML = b'''<?xml version="1.0" encoding="UTF-8"?>
<GEPC64Table date="2005-07-01T00:00:00Z">
  <entry index="158" companyPrefix="0073796"/>
  <entry index="1" companyPrefix="0614141"/>
</GEPC64Table>
'''


def pad_scheme(binary_pad, tag_pad):
    binary_field = {'name': 'value', 'seq': 1, 'bit_length': 8}
    tag_field = {'name': 'value', 'seq': 1, 'length': 3}
    if binary_pad:
        binary_field.update(pad_char='0', pad_dir='LEFT', length=3)
    if tag_pad:
        tag_field.update(pad_char='0', pad_dir='LEFT')
    return {
        'name': 'PAD-12', 'tag_length': 12, 'option_key': '1',
        'levels': [
            {'type': 'BINARY', 'prefix_match': '1010', 'options': [
                {'option_key': '1', 'pattern': '^1010([01]{8})$',
                 'grammar': "'1010' value", 'fields': [binary_field]}]},
            {'type': 'TAG_ENCODING', 'prefix_match': 'urn:epc:tag:pad:',
             'options': [
                 {'option_key': '1',
                  'pattern': '^urn:epc:tag:pad:([0-9]+)$',
                  'grammar': "'urn:epc:tag:pad:' value",
                  'fields': [tag_field]}]},
        ],
    }


class TestParseDefinition(unittest.TestCase):
    def setUp(self):
        self.docs = parse_definition(io.BytesIO(TOY_XML))

    def test_documents(self):
        self.assertEqual(len(self.docs), 1)
        doc = self.docs[0]
        self.assertEqual(doc['name'], 'TOY-8')
        self.assertEqual(doc['tag_length'], '8')
        self.assertEqual([level['type'] for level in doc['levels']],
                         ['BINARY', 'LEGACY', 'PURE_IDENTITY'])
        field = doc['levels'][0]['options'][0]['fields'][0]
        self.assertEqual(field['bit_length'], '4')
        self.assertEqual(field['bit_pad_dir'], 'LEFT')
        self.assertEqual(len(doc['levels'][2]['rules']), 3)

    def test_model(self):
        scheme = build_scheme(self.docs[0])
        self.assertEqual(scheme.tag_length, 8)
        level = scheme.level(PURE_IDENTITY)
        self.assertEqual([r.new_field_name for r in level.format_rules],
                         ['name', 'half'])
        self.assertEqual([r.new_field_name for r in level.extract_rules],
                         ['value'])
        self.assertEqual(scheme.level(BINARY).option('1').field(
            'value').bit_length, 4)

    def test_no_scheme(self):
        self.assertRaises(SchemeDefinitionError, parse_definition,
                          io.BytesIO(b'<epcTagDataTranslation/>'))

    def test_malformed(self):
        self.assertRaises(SchemeDefinitionError, parse_definition,
                          io.BytesIO(b'<scheme name="x">'))

    def test_load_definitions(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'toy.xml')
            with open(path, 'wb') as fp:
                fp.write(TOY_XML)
            docs = load_definitions([path, path])
        self.assertEqual([doc['name'] for doc in docs], ['TOY-8', 'TOY-8'])


class TestDefinitionEngine(unittest.TestCase):
    def setUp(self):
        self.engine = TDTEngine.from_definitions(
            parse_definition(io.BytesIO(TOY_XML)), tables=TOY_TABLES)

    def test_legacy_to_binary(self):
        self.assertEqual(self.engine.convert('toy=7', {}, BINARY),
                         '11110111')

    def test_binary_to_pure_identity(self):
        self.assertEqual(self.engine.convert('11110111', {}, PURE_IDENTITY),
                         'urn:toy:seven.3')

    def test_pure_identity_to_legacy(self):
        self.assertEqual(self.engine.convert('urn:toy:three', {}, LEGACY),
                         'toy=3')

    def test_missing_table_row(self):
        self.assertRaises(TableLookupError, self.engine.convert,
                          'urn:toy:eight', {}, LEGACY)

    def test_value_too_wide(self):
        self.assertRaises(BitLengthOverflowError, self.engine.convert,
                          'toy=99', {}, BINARY)

    def test_missing_output_level(self):
        self.assertRaises(SchemeDefinitionError, self.engine.convert,
                          'toy=7', {}, TAG_ENCODING)


class TestPadConflict(unittest.TestCase):
    def test_tag_pad_is_stripped_and_restored(self):
        engine = TDTEngine.from_definitions([pad_scheme(False, True)])
        self.assertEqual(engine.convert('urn:epc:tag:pad:005', {}, BINARY),
                         '101000000101')
        self.assertEqual(engine.convert('101000000101', {}, TAG_ENCODING),
                         'urn:epc:tag:pad:005')

    def test_binary_pad(self):
        engine = TDTEngine.from_definitions([pad_scheme(True, False)])
        self.assertEqual(engine.convert('urn:epc:tag:pad:5', {}, BINARY),
                         '101000000101')
        self.assertEqual(engine.convert('101000000101', {}, TAG_ENCODING),
                         'urn:epc:tag:pad:5')

    def test_conflict_on_encode(self):
        engine = TDTEngine.from_definitions([pad_scheme(True, True)])
        self.assertRaises(SchemeDefinitionConflictError, engine.convert,
                          'urn:epc:tag:pad:005', {}, BINARY)

    def test_conflict_on_decode(self):
        engine = TDTEngine.from_definitions([pad_scheme(True, True)])
        self.assertRaises(SchemeDefinitionConflictError, engine.convert,
                          '101000110000', {}, TAG_ENCODING)


class TestBuildErrors(unittest.TestCase):
    def setUp(self):
        self.doc = pad_scheme(False, True)

    def options(self, index=0):
        return self.doc['levels'][index]['options']

    def test_valid(self):
        self.assertEqual(build_scheme(self.doc).name, 'PAD-12')

    def test_missing_name(self):
        del self.doc['name']
        self.assertRaises(SchemeDefinitionError, build_scheme, self.doc)

    def test_field_beyond_capture_groups(self):
        self.options()[0]['fields'][0]['seq'] = 2
        self.assertRaises(SchemeDefinitionError, build_scheme, self.doc)

    def test_duplicate_option(self):
        self.options().append(dict(self.options()[0]))
        self.assertRaises(SchemeDefinitionError, build_scheme, self.doc)

    def test_duplicate_level(self):
        self.doc['levels'].append(dict(self.doc['levels'][0]))
        self.assertRaises(SchemeDefinitionError, build_scheme, self.doc)

    def test_unknown_level_type(self):
        self.doc['levels'][0]['type'] = 'RFID'
        self.assertRaises(SchemeDefinitionError, build_scheme, self.doc)

    def test_unknown_compaction(self):
        self.options()[0]['fields'][0]['compaction'] = '4-bit'
        self.assertRaises(SchemeDefinitionError, build_scheme, self.doc)

    def test_bad_pad_direction(self):
        self.options(1)[0]['fields'][0]['pad_dir'] = 'UP'
        self.assertRaises(SchemeDefinitionError, build_scheme, self.doc)

    def test_bad_pattern(self):
        self.options()[0]['pattern'] = '^1010([01]{8}$'
        self.assertRaises(SchemeDefinitionError, build_scheme, self.doc)

    def test_unknown_rule_function(self):
        self.doc['levels'][0]['rules'] = [
            {'type': 'EXTRACT', 'seq': 1, 'new_field_name': 'x',
             'function': 'REVERSE(value)'}]
        self.assertRaises(SchemeDefinitionError, build_scheme, self.doc)

    def test_unknown_rule_type(self):
        self.doc['levels'][0]['rules'] = [
            {'type': 'PARSE', 'seq': 1, 'new_field_name': 'x',
             'function': 'LENGTH(value)'}]
        self.assertRaises(SchemeDefinitionError, build_scheme, self.doc)

    def test_builtin_definitions(self):
        names = [scheme.name for scheme in build_schemes(BUILTIN_DEFINITIONS)]
        self.assertIn('SGTIN-96', names)
        self.assertEqual(len(names), 9)


class TestCompanyPrefixTable(unittest.TestCase):
    def test_parse(self):
        table = parse_company_prefix_table(io.BytesIO(GEPC64_XML))
        self.assertEqual(len(table), 2)
        self.assertEqual(table.company_prefix('158'), '0073796')
        self.assertEqual(table.index('0614141'), '1')

    def test_incomplete_entry(self):
        self.assertRaises(SchemeDefinitionError, parse_company_prefix_table,
                          io.BytesIO(b'<GEPC64Table><entry index="1"/>'
                                     b'</GEPC64Table>'))
