import logging
import unittest

from click.testing import CliRunner

from tdt import __version__
from tdt.cli import cli

logLevel = logging.WARNING
logging.basicConfig(level=logLevel,
                    format='%(asctime)s %(name)s: %(levelname)s: %(message)s')

SGTIN_96_LEGACY = 'gtin=00037000302414;serial=1041970'
SGTIN_96_TAG = 'urn:epc:tag:sgtin-96:3.0037000.030241.1041970'
SGTIN_96_PARAMS = ['-p', 'taglength=96', '-p', 'filter=3',
                   '-p', 'companyprefixlength=7']
SGTIN_64_BINARY = ('1001100000010011110001111010100011110100000000000000'
                   '000000000001')

TOY_XML = '''<epcTagDataTranslation>
  <scheme name="TOY-8" optionKey="1" tagLength="8">
    <level type="BINARY" prefixMatch="1111">
      <option optionKey="1" pattern="^1111([01]{4})$" grammar="'1111' value">
        <field seq="1" name="value" bitLength="4"/>
      </option>
    </level>
    <level type="LEGACY" prefixMatch="toy=">
      <option optionKey="1" pattern="^toy=([0-9]+)$" grammar="'toy=' value">
        <field seq="1" name="value"/>
      </option>
    </level>
  </scheme>
</epcTagDataTranslation>
'''


class CliTestCase(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()
        root = logging.getLogger()
        self._handlers = list(root.handlers)
        self._level = root.level

    def tearDown(self):
        # cli() installs handlers on the captured streams of each run
        root = logging.getLogger()
        root.handlers[:] = self._handlers
        root.setLevel(self._level)

    def invoke(self, *args):
        return self.runner.invoke(cli, list(args))


class TestConvert(CliTestCase):
    def test_legacy_to_tag(self):
        result = self.invoke('convert', SGTIN_96_LEGACY, '-o', 'tag_encoding',
                             *SGTIN_96_PARAMS)
        self.assertEqual(result.exit_code, 0)
        self.assertIn(SGTIN_96_TAG, result.output)

    def test_input_level(self):
        result = self.invoke('convert', SGTIN_96_TAG, '-i', 'TAG_ENCODING',
                             '-o', 'LEGACY')
        self.assertEqual(result.exit_code, 0)
        self.assertIn(SGTIN_96_LEGACY, result.output)

    def test_wrong_input_level(self):
        result = self.invoke('convert', SGTIN_96_TAG, '-i', 'BINARY',
                             '-o', 'LEGACY')
        self.assertEqual(result.exit_code, 1)
        self.assertNotIn(SGTIN_96_LEGACY, result.output)

    def test_missing_parameters(self):
        result = self.invoke('convert', SGTIN_96_LEGACY, '-o', 'BINARY')
        self.assertEqual(result.exit_code, 1)

    def test_tag_length_not_a_number(self):
        result = self.invoke('convert', SGTIN_96_LEGACY, '-o', 'BINARY',
                             '-p', 'taglength=abc', '-p', 'filter=3',
                             '-p', 'companyprefixlength=7')
        self.assertEqual(result.exit_code, 1)

    def test_malformed_parameter(self):
        result = self.invoke('convert', SGTIN_96_LEGACY, '-o', 'BINARY',
                             '-p', 'taglength')
        self.assertEqual(result.exit_code, 2)

    def test_unknown_level(self):
        result = self.invoke('convert', SGTIN_96_LEGACY, '-o', 'RFID')
        self.assertEqual(result.exit_code, 2)

    def test_company_prefix_feed(self):
        with self.runner.isolated_filesystem():
            with open('prefixes.csv', 'w') as fp:
                fp.write('158,0073796\n')
            result = self.invoke('-c', 'prefixes.csv', 'convert',
                                 'gtin=20073796510026;serial=1',
                                 '-o', 'BINARY', '-p', 'taglength=64',
                                 '-p', 'filter=3',
                                 '-p', 'companyprefixlength=7')
        self.assertEqual(result.exit_code, 0)
        self.assertIn(SGTIN_64_BINARY, result.output)

    def test_gepc64_table(self):
        with self.runner.isolated_filesystem():
            with open('gepc64.xml', 'w') as fp:
                fp.write('<GEPC64Table>'
                         '<entry index="158" companyPrefix="0073796"/>'
                         '</GEPC64Table>')
            result = self.invoke('-g', 'gepc64.xml', 'convert',
                                 SGTIN_64_BINARY, '-o', 'TAG_ENCODING',
                                 '-p', 'companyprefixlength=7')
        self.assertEqual(result.exit_code, 0)
        self.assertIn('urn:epc:tag:sgtin-64:3.0073796.251002.1',
                      result.output)

    def test_scheme_file(self):
        with self.runner.isolated_filesystem():
            with open('toy.xml', 'w') as fp:
                fp.write(TOY_XML)
            result = self.invoke('-s', 'toy.xml', 'convert', 'toy=7',
                                 '-o', 'BINARY')
        self.assertEqual(result.exit_code, 0)
        self.assertIn('11110111', result.output)


class TestAuxiliary(CliTestCase):
    def test_hex2bin(self):
        result = self.invoke('hex2bin', '3074')
        self.assertEqual(result.exit_code, 0)
        self.assertIn('0011000001110100', result.output)

    def test_hex2bin_rejects_garbage(self):
        result = self.invoke('hex2bin', 'xyz')
        self.assertEqual(result.exit_code, 2)

    def test_bin2hex(self):
        result = self.invoke('bin2hex', '0011000001110100')
        self.assertEqual(result.exit_code, 0)
        self.assertIn('3074', result.output)

    def test_schemes(self):
        result = self.invoke('schemes')
        self.assertEqual(result.exit_code, 0)
        self.assertIn('SGTIN-96 (96 bits): ', result.output)
        self.assertIn('USDOD-64 (64 bits): ', result.output)

    def test_version(self):
        result = self.invoke('version')
        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)
