"""
Error codes and decode failures for tops-decoder.

Structured error codes for machine-parseable output.

Format: E{category}{number}
- E1xxx: Decode errors
- E3xxx: Configuration errors

Decode failures are raised as exceptions. All of them derive from
DecodeError (itself a ValueError) so callers that only care about
"bad bytes" can catch one type, while streaming callers can single out
IncompleteMessage and wait for more data.
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Structured error codes."""

    # E1xxx: Decode errors
    E1001_INCOMPLETE_MESSAGE = "E1001"
    E1002_RESERVED_BITS_SET = "E1002"
    E1003_UNKNOWN_SYSTEM_EVENT = "E1003"
    E1004_INVALID_SYMBOL_TEXT = "E1004"
    E1005_UNRECOGNIZED_TAG = "E1005"

    # E3xxx: Configuration errors
    E3001_INVALID_CONFIG = "E3001"


# Error code metadata
ERROR_METADATA = {
    ErrorCode.E1001_INCOMPLETE_MESSAGE: {
        'severity': 'info',
        'message': 'Buffer does not yet hold a complete message',
        'recoverable': True,
    },
    ErrorCode.E1002_RESERVED_BITS_SET: {
        'severity': 'error',
        'message': 'Reserved bits set in flag byte',
        'recoverable': False,
    },
    ErrorCode.E1003_UNKNOWN_SYSTEM_EVENT: {
        'severity': 'error',
        'message': 'Unknown system event code',
        'recoverable': False,
    },
    ErrorCode.E1004_INVALID_SYMBOL_TEXT: {
        'severity': 'error',
        'message': 'Symbol field is not valid text',
        'recoverable': False,
    },
    ErrorCode.E1005_UNRECOGNIZED_TAG: {
        'severity': 'error',
        'message': 'Unrecognized message type',
        'recoverable': False,
    },
    ErrorCode.E3001_INVALID_CONFIG: {
        'severity': 'error',
        'message': 'Invalid configuration',
        'recoverable': False,
    },
}


class DecodeError(ValueError):
    """
    Base class for all decode failures.

    Example:
        raise UnrecognizedTag(
            ErrorCode.E1005_UNRECOGNIZED_TAG,
            context={'tag': 0xFF},
        )
    """

    def __init__(self, code: ErrorCode, context: Optional[dict] = None):
        self.code = code
        self.context = context or {}
        super().__init__(self.message)

    @property
    def severity(self) -> str:
        return ERROR_METADATA.get(self.code, {}).get('severity', 'error')

    @property
    def message(self) -> str:
        base_msg = ERROR_METADATA.get(self.code, {}).get('message', 'Unknown error')
        if self.context:
            return f"{base_msg}: {self.context}"
        return base_msg

    @property
    def recoverable(self) -> bool:
        return ERROR_METADATA.get(self.code, {}).get('recoverable', False)

    def to_dict(self) -> dict:
        return {
            'code': self.code.value,
            'severity': self.severity,
            'message': self.message,
            'recoverable': self.recoverable,
            'context': self.context,
        }


class IncompleteMessage(DecodeError):
    """The buffer ends before the message does. Buffer more bytes and retry."""

    def __init__(self, needed: int, available: int, message_type: Optional[str] = None):
        self.needed = needed
        self.available = available
        self.message_type = message_type
        context = {'needed': needed, 'available': available}
        if message_type is not None:
            context['message_type'] = message_type
        super().__init__(ErrorCode.E1001_INCOMPLETE_MESSAGE, context)


class MalformedMessage(DecodeError):
    """The tag was recognized but the body violates a field-level rule."""


class ReservedBitsError(MalformedMessage):
    """A flag byte carries nonzero reserved bits."""

    def __init__(self, flags: int, reserved_mask: int):
        self.flags = flags
        self.reserved_mask = reserved_mask
        super().__init__(
            ErrorCode.E1002_RESERVED_BITS_SET,
            {'flags': f'0x{flags:02X}', 'reserved_mask': f'0x{reserved_mask:02X}'},
        )


class UnrecognizedTag(DecodeError):
    """The leading byte does not match any known message type."""

    def __init__(self, tag: int):
        self.tag = tag
        super().__init__(ErrorCode.E1005_UNRECOGNIZED_TAG, {'tag': f'0x{tag:02X}'})


class ConfigError(ValueError):
    """Configuration failed validation."""

    def __init__(self, errors: list):
        self.code = ErrorCode.E3001_INVALID_CONFIG
        self.errors = list(errors)
        super().__init__('; '.join(self.errors) or 'Invalid configuration')
