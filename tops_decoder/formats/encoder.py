"""
Encode records back to TOPS wire bytes.

Used to build fixtures and replay files. Opaque message types are written
as a tag followed by a zero-filled body of the table length.
"""

import struct

from .message_types import MessageType
from .primitives import PRICE_SCALE, SYMBOL_WIDTH, pack_flags
from .records import (
    MarketSession,
    OpaqueMessage,
    QuoteUpdate,
    SystemEvent,
    TradeReport,
)


# B=tag, B=event code, q=timestamp
SYSTEM_EVENT_FORMAT = '<BBq'
# B=tag, B=flags, q=timestamp, 8s=symbol, I=bid size, Q=bid price, Q=ask price, I=ask size
QUOTE_UPDATE_FORMAT = '<BBq8sIQQI'
# B=tag, B=flags, q=timestamp, 8s=symbol, I=size, Q=price, q=trade id
TRADE_REPORT_FORMAT = '<BBq8sIQq'


def encode_price(price: float) -> int:
    return int(round(price * PRICE_SCALE))


def encode_symbol(symbol) -> bytes:
    raw = symbol if isinstance(symbol, bytes) else str(symbol).encode('utf-8')
    if len(raw) > SYMBOL_WIDTH:
        raise ValueError(f"Symbol longer than {SYMBOL_WIDTH} bytes: {raw!r}")
    return raw.ljust(SYMBOL_WIDTH, b' ')


def encode_message(message) -> bytes:
    """
    Encode a decoded record to its wire form.

    Raises:
        TypeError: message is not a TOPS record
        ValueError: A field does not fit its wire width
    """
    if isinstance(message, SystemEvent):
        return struct.pack(
            SYSTEM_EVENT_FORMAT,
            MessageType.SYSTEM_EVENT.tag,
            message.kind.value,
            message.timestamp.nanos,
        )

    if isinstance(message, QuoteUpdate):
        flags = pack_flags([
            not message.available,
            message.session == MarketSession.OUT_OF_HOURS,
        ])
        return struct.pack(
            QUOTE_UPDATE_FORMAT,
            MessageType.QUOTE_UPDATE.tag,
            flags,
            message.timestamp.nanos,
            encode_symbol(message.symbol),
            message.bid_size,
            encode_price(message.bid_price),
            encode_price(message.ask_price),
            message.ask_size,
        )

    if isinstance(message, TradeReport):
        cond = message.sale_condition
        flags = pack_flags([
            cond.intermarket_sweep,
            cond.extended_hours,
            cond.odd_lot,
            cond.trade_through_exempt,
            cond.single_price,
        ])
        return struct.pack(
            TRADE_REPORT_FORMAT,
            MessageType.TRADE_REPORT.tag,
            flags,
            message.timestamp.nanos,
            encode_symbol(message.symbol),
            message.size,
            encode_price(message.price),
            message.id,
        )

    if isinstance(message, OpaqueMessage):
        return bytes([message.kind.tag]) + b'\x00' * message.kind.body_length

    raise TypeError(f"Cannot encode {type(message).__name__}")


# Verify struct sizes at module load
for _fmt, _type in (
    (SYSTEM_EVENT_FORMAT, MessageType.SYSTEM_EVENT),
    (QUOTE_UPDATE_FORMAT, MessageType.QUOTE_UPDATE),
    (TRADE_REPORT_FORMAT, MessageType.TRADE_REPORT),
):
    assert struct.calcsize(_fmt) == _type.wire_length, \
        f"{_type.name} format size mismatch: {struct.calcsize(_fmt)} != {_type.wire_length}"
del _fmt, _type
