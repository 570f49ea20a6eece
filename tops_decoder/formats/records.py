"""
Decoded TOPS record types.

All records are frozen dataclasses: immutable, hashable and compared by
value. Quote updates and trade reports are generic over the symbol type
chosen by the caller at decode time (see symbols.py).
"""

from dataclasses import dataclass, asdict
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar, Union

from .message_types import MessageType


S = TypeVar('S')

NANOS_PER_SECOND = 1_000_000_000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True, order=True)
class Timestamp:
    """
    UTC instant with nanosecond precision.

    Stored as nanoseconds since the Unix epoch. Python datetimes only carry
    microseconds, so to_datetime() truncates; isoformat() keeps all nine
    fractional digits.
    """
    nanos: int

    @property
    def seconds(self) -> int:
        return self.nanos // NANOS_PER_SECOND

    @property
    def nanosecond(self) -> int:
        """Nanoseconds within the current second."""
        return self.nanos % NANOS_PER_SECOND

    def to_datetime(self) -> datetime:
        """Aware UTC datetime, truncated to microseconds."""
        return _EPOCH + timedelta(seconds=self.seconds, microseconds=self.nanosecond // 1000)

    def isoformat(self) -> str:
        base = (_EPOCH + timedelta(seconds=self.seconds)).strftime('%Y-%m-%dT%H:%M:%S')
        return f"{base}.{self.nanosecond:09d}Z"

    @classmethod
    def from_datetime(cls, dt: datetime) -> 'Timestamp':
        """Build from a datetime (naive values are taken as UTC)."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        delta = dt - _EPOCH
        micros = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
        return cls(micros * 1000)

    def __str__(self) -> str:
        return self.isoformat()


class SystemEventKind(Enum):
    """System event codes, valued by their wire byte."""
    START_OF_MESSAGES = 0x4F       # 'O'
    START_OF_SYSTEM_HOURS = 0x53   # 'S'
    START_OF_REGULAR_HOURS = 0x52  # 'R'
    END_OF_REGULAR_HOURS = 0x4D    # 'M'
    END_OF_SYSTEM_HOURS = 0x45     # 'E'
    END_OF_MESSAGES = 0x43         # 'C'

    @classmethod
    def from_code(cls, code: int) -> Optional['SystemEventKind']:
        """Map a wire byte to its event kind, or None if unknown."""
        try:
            return cls(code)
        except ValueError:
            return None


class MarketSession(Enum):
    """Session a quote belongs to."""
    REGULAR = 'regular'
    OUT_OF_HOURS = 'out_of_hours'


@dataclass(frozen=True)
class SystemEvent:
    """Feed-wide session milestone."""
    kind: SystemEventKind
    timestamp: Timestamp

    message_type = MessageType.SYSTEM_EVENT

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.message_type.name,
            'kind': self.kind.name,
            'timestamp': self.timestamp.isoformat(),
            'timestamp_ns': self.timestamp.nanos,
        }


@dataclass(frozen=True)
class QuoteUpdate(Generic[S]):
    """
    Top-of-book quote for one symbol.

    Attributes:
        available: False when the wire flags the symbol as not available
        session: Regular or out-of-hours session
        timestamp: Exchange timestamp
        symbol: Symbol in the caller's chosen representation
        bid_size: Aggregate size at the best bid
        bid_price: Best bid price
        ask_size: Aggregate size at the best ask
        ask_price: Best ask price
    """
    available: bool
    session: MarketSession
    timestamp: Timestamp
    symbol: S
    bid_size: int
    bid_price: float
    ask_size: int
    ask_price: float

    message_type = MessageType.QUOTE_UPDATE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.message_type.name,
            'available': self.available,
            'session': self.session.value,
            'timestamp': self.timestamp.isoformat(),
            'timestamp_ns': self.timestamp.nanos,
            'symbol': _symbol_text(self.symbol),
            'bid_size': self.bid_size,
            'bid_price': self.bid_price,
            'ask_size': self.ask_size,
            'ask_price': self.ask_price,
        }


@dataclass(frozen=True)
class SaleCondition:
    """Sale condition flags attached to a trade report."""
    intermarket_sweep: bool = False
    extended_hours: bool = False
    odd_lot: bool = False
    trade_through_exempt: bool = False
    single_price: bool = False


@dataclass(frozen=True)
class TradeReport(Generic[S]):
    """Single execution on the exchange."""
    sale_condition: SaleCondition
    timestamp: Timestamp
    symbol: S
    size: int
    price: float
    id: int

    message_type = MessageType.TRADE_REPORT

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.message_type.name,
            'sale_condition': asdict(self.sale_condition),
            'timestamp': self.timestamp.isoformat(),
            'timestamp_ns': self.timestamp.nanos,
            'symbol': _symbol_text(self.symbol),
            'size': self.size,
            'price': self.price,
            'id': self.id,
        }


@dataclass(frozen=True)
class OpaqueMessage:
    """Known message type whose payload is consumed but not decoded."""
    kind: MessageType

    @property
    def message_type(self) -> MessageType:
        return self.kind

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.kind.name}


Message = Union[SystemEvent, QuoteUpdate, TradeReport, OpaqueMessage]


def _symbol_text(symbol: Any) -> str:
    if isinstance(symbol, bytes):
        return symbol.decode('utf-8')
    return str(symbol)
