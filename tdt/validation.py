"""Character set and decimal range checks for field values.

Violations are logged by default and the conversion carries on. A
strict validator raises them instead.
"""

import re

from .log import get_logger
from .tdt_errors import CharacterSetViolation, RangeViolation
from .util import is_decimal

logger = get_logger(__name__)


class Validator(object):
    __slots__ = ['strict']

    def __init__(self, strict=False):
        self.strict = strict

    def report(self, error):
        if self.strict:
            raise error
        logger.warning('%s', error)

    def check_character_set(self, fieldname, value, character_set):
        """Check that every character of value is in character_set.

        character_set is a regex character class such as '[0-9]*'; a
        missing trailing '*' is implied.
        """
        if character_set is None:
            return True
        if not character_set.endswith('*'):
            character_set += '*'
        if re.fullmatch(character_set, value):
            return True
        self.report(CharacterSetViolation(
            fieldname, value,
            'field {} ({}) does not conform to the allowed character set '
            '({})'.format(fieldname, value, character_set)))
        return False

    def check_range(self, fieldname, value, minimum=None, maximum=None):
        """Check a decimal value against its declared bounds.

        Empty and non-decimal values are left to the character set check.
        """
        if not value or not is_decimal(value):
            return True
        number = int(value)
        if minimum is not None and number < int(minimum):
            self.report(RangeViolation(
                fieldname, value,
                'field {} ({}) is less than DecimalMinimum ({}) '
                'allowed'.format(fieldname, value, minimum)))
            return False
        if maximum is not None and number > int(maximum):
            self.report(RangeViolation(
                fieldname, value,
                'field {} ({}) is greater than DecimalMaximum ({}) '
                'allowed'.format(fieldname, value, maximum)))
            return False
        return True

    def check_field(self, field, value):
        """Run both checks using the limits declared on field."""
        ok = self.check_character_set(field.name, value, field.character_set)
        return self.check_range(field.name, value, field.decimal_minimum,
                                field.decimal_maximum) and ok
