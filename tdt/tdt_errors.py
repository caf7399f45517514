__all__ = [
    # Exceptions
    "TDTError",
    "NoMatchError",
    "AmbiguousMatchError",
    "UnsupportedCompactionError",
    "SchemeDefinitionError",
    "SchemeDefinitionConflictError",
    "BitLengthOverflowError",
    "MissingRuleOperandError",
    "MissingFieldError",
    "FieldValueError",
    "TableLookupError",
    "ValidationError",
    "CharacterSetViolation",
    "RangeViolation",
]


class TDTError(Exception):
    pass


class NoMatchError(TDTError):
    """No scheme, level or option matched the input value."""


class AmbiguousMatchError(TDTError):
    """More than one scheme/level or option survived disambiguation."""


class UnsupportedCompactionError(TDTError):
    pass


class SchemeDefinitionError(TDTError):
    """The scheme model is malformed or lacks a required level/option."""


class SchemeDefinitionConflictError(SchemeDefinitionError):
    """Both the binary and the non-binary field declare a pad character."""


class BitLengthOverflowError(TDTError):
    pass


class MissingRuleOperandError(TDTError):
    pass


class MissingFieldError(TDTError):
    pass


class FieldValueError(TDTError):
    pass


class TableLookupError(TDTError):
    pass


class ValidationError(TDTError):
    def __init__(self, fieldname, value, message):
        super().__init__(message)
        self.fieldname = fieldname
        self.value = value


class CharacterSetViolation(ValidationError):
    pass


class RangeViolation(ValidationError):
    pass
