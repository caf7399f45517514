"""Rule interpreter.

Rules derive extra fields from those captured by the option pattern
(EXTRACT rules, run after decoding the input) or prepare the fields an
output grammar needs (FORMAT rules, run before encoding the output).

A rule function such as ``SUBSTR(gtin,0,1)`` is parsed once, when the
scheme is loaded, into a :class:`RuleCall`. Its parameters are literals
(quoted strings or plain digits) or references to fields of the
conversion context.
"""

import operator
import re
from collections import namedtuple

from .log import get_logger
from .tdt_errors import (FieldValueError, MissingRuleOperandError,
                         SchemeDefinitionError)

logger = get_logger(__name__)

LITERAL = 'literal'
FIELD = 'field'

# TABLELOOKUP table name served by the company prefix index table
COMPANY_PREFIX_TABLE = 'tdt64bitcpi'

Param = namedtuple('Param', ['kind', 'value'])
RuleCall = namedtuple('RuleCall', ['name', 'params'])

_CALL_RE = re.compile(r'^\s*(\w+)\s*\((.*)\)\s*$', re.S)
_PARAM_RE = re.compile(r'''\s*(?:"[^"]*"|'[^']*')\s*|[^,]+''')
_INTEGER_RE = re.compile(r'-?[0-9]+')


def gs1_checksum(digits):
    '''Given a GS1 key without its check digit, calculate the check digit.

    >>> gs1_checksum('0003700030241')
    '4'
    '''
    total = 0
    for count, char in enumerate(reversed(digits)):
        if not char.isdigit():
            raise FieldValueError(
                'Cannot compute a GS1 check digit for {!r}'.format(digits))
        digit = int(char)
        if count % 2 == 0:
            digit = digit * 3
        total += digit
    return str((10 - total % 10) % 10)


def _value(context, param):
    if param.kind == LITERAL:
        return param.value
    try:
        return context[param.value]
    except KeyError:
        raise MissingRuleOperandError(
            'No value for {} can be found in the conversion '
            'context'.format(param.value))


def _int_value(context, param):
    value = _value(context, param)
    try:
        return int(value)
    except ValueError:
        raise FieldValueError('{} ({!r}) is not an integer'.format(
            param.value, value))


def _tablelookup(context, params, lookup):
    # TABLELOOKUP(value, table, input column, output column)
    value = _value(context, params[0])
    table, in_col, out_col = (param.value for param in params[1:])
    return lookup(table, in_col, out_col, value)


def _length(context, params, lookup):
    return str(len(_value(context, params[0])))


def _gs1checksum(context, params, lookup):
    return gs1_checksum(_value(context, params[0]))


def _substr(context, params, lookup):
    value = _value(context, params[0])
    start = _int_value(context, params[1])
    if len(params) == 2:
        return value[start:]
    return value[start:start + _int_value(context, params[2])]


def _concat(context, params, lookup):
    return ''.join(_value(context, param) for param in params)


def _arithmetic(func):
    def handler(context, params, lookup):
        try:
            return str(func(_int_value(context, params[0]),
                            _int_value(context, params[1])))
        except ZeroDivisionError:
            raise FieldValueError('Division by zero in {}'.format(
                ', '.join(param.value for param in params)))
    return handler


RULE_FUNCTIONS = {
    # name: (handler, min params, max params)
    'TABLELOOKUP': (_tablelookup, 4, 4),
    'LENGTH': (_length, 1, 1),
    'GS1CHECKSUM': (_gs1checksum, 1, 1),
    'SUBSTR': (_substr, 2, 3),
    'CONCAT': (_concat, 1, None),
    'ADD': (_arithmetic(operator.add), 2, 2),
    'MULTIPLY': (_arithmetic(operator.mul), 2, 2),
    'DIVIDE': (_arithmetic(operator.floordiv), 2, 2),
    'SUBTRACT': (_arithmetic(operator.sub), 2, 2),
    'MOD': (_arithmetic(operator.mod), 2, 2),
}


def parse_param(token):
    token = token.strip()
    if len(token) >= 2 and token[0] == token[-1] and token[0] in '\'"':
        return Param(LITERAL, token[1:-1])
    if _INTEGER_RE.fullmatch(token):
        return Param(LITERAL, token)
    return Param(FIELD, token)


def parse_function(text):
    """Parse a rule function string into a RuleCall.

    >>> parse_function("SUBSTR(gtin,0,1)")
    RuleCall(name='SUBSTR', params=(Param(kind='field', value='gtin'), \
Param(kind='literal', value='0'), Param(kind='literal', value='1')))
    """
    match = _CALL_RE.match(text)
    if not match:
        raise SchemeDefinitionError('Malformed rule function: {}'.format(text))
    name = match.group(1).upper()
    try:
        _, min_params, max_params = RULE_FUNCTIONS[name]
    except KeyError:
        raise SchemeDefinitionError(
            'Unsupported rule function: {}'.format(text))
    params = tuple(parse_param(token)
                   for token in _PARAM_RE.findall(match.group(2))
                   if token.strip())
    if len(params) < min_params or (max_params is not None and
                                    len(params) > max_params):
        raise SchemeDefinitionError(
            'Incorrect number of parameters to {}: {}'.format(name, text))
    return RuleCall(name, params)


def process_rule(context, rule, lookup):
    """Evaluate rule against context and store its result there.

    lookup is a callable(table, in_col, out_col, value) serving
    TABLELOOKUP.
    """
    handler = RULE_FUNCTIONS[rule.call.name][0]
    result = handler(context, rule.call.params, lookup)
    context[rule.new_field_name] = result
    logger.debugfast('%s rule result: %s = %s', rule.call.name,
                     rule.new_field_name, result)
    return result


def process_rules(context, rules, lookup):
    """Run rules (already sorted by sequence number) in order."""
    previous = None
    for rule in rules:
        assert previous is None or previous < rule.seq, \
            'Rule out of sequence order'
        previous = rule.seq
        logger.debugfast('Rule #%s: %s', rule.seq, rule.new_field_name)
        process_rule(context, rule, lookup)
