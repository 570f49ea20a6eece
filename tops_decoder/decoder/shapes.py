"""
Message shape decoders.

One decoder per message type. Each takes the buffer, the offset of the
first body byte (just past the tag) and a symbol factory, and returns
(record, new_offset). Tag matching and the up-front length check are done
by the dispatcher.

Layouts (offsets relative to the tag byte):

    System Event (10 bytes)
        0     tag          0x53
        1     event code   see SystemEventKind
        2-9   timestamp

    Quote Update (42 bytes)
        0      tag          0x51
        1      flags        A P r r r r r r
        2-9    timestamp
        10-17  symbol
        18-21  bid size
        22-29  bid price
        30-37  ask price
        38-41  ask size

    Trade Report (38 bytes)
        0      tag          0x54
        1      flags        F T I 8 X r r r
        2-9    timestamp
        10-17  symbol
        18-21  size
        22-29  price
        30-37  trade id

Note the ask side is price-then-size while the bid side is size-then-price.
"""

from typing import Callable, Dict, Tuple

from ..core.errors import ErrorCode, MalformedMessage
from ..formats.message_types import MessageType
from ..formats.primitives import (
    SYMBOL_WIDTH,
    read_flags,
    read_i64,
    read_padded_text,
    read_price,
    read_timestamp,
    read_u8,
    read_u32,
)
from ..formats.records import (
    MarketSession,
    OpaqueMessage,
    QuoteUpdate,
    SaleCondition,
    SystemEvent,
    SystemEventKind,
    TradeReport,
)


# Quote update flags: symbol not available, out-of-hours session
QUOTE_FLAG_COUNT = 2

# Sale condition flags: F, T, I, 8, X
SALE_CONDITION_FLAG_COUNT = 5


def decode_system_event(data, offset: int, symbol=str) -> Tuple[SystemEvent, int]:
    code, offset = read_u8(data, offset)
    kind = SystemEventKind.from_code(code)
    if kind is None:
        raise MalformedMessage(
            ErrorCode.E1003_UNKNOWN_SYSTEM_EVENT,
            {'code': f'0x{code:02X}'},
        )
    timestamp, offset = read_timestamp(data, offset)
    return SystemEvent(kind=kind, timestamp=timestamp), offset


def decode_quote_update(data, offset: int, symbol=str) -> Tuple[QuoteUpdate, int]:
    (not_available, out_of_hours), offset = read_flags(data, offset, QUOTE_FLAG_COUNT)
    timestamp, offset = read_timestamp(data, offset)
    sym, offset = read_padded_text(data, offset, SYMBOL_WIDTH, symbol)
    bid_size, offset = read_u32(data, offset)
    bid_price, offset = read_price(data, offset)
    ask_price, offset = read_price(data, offset)
    ask_size, offset = read_u32(data, offset)

    return QuoteUpdate(
        available=not not_available,
        session=MarketSession.OUT_OF_HOURS if out_of_hours else MarketSession.REGULAR,
        timestamp=timestamp,
        symbol=sym,
        bid_size=bid_size,
        bid_price=bid_price,
        ask_size=ask_size,
        ask_price=ask_price,
    ), offset


def decode_sale_condition(data, offset: int) -> Tuple[SaleCondition, int]:
    flags, offset = read_flags(data, offset, SALE_CONDITION_FLAG_COUNT)
    intermarket_sweep, extended_hours, odd_lot, trade_through_exempt, single_price = flags
    return SaleCondition(
        intermarket_sweep=intermarket_sweep,
        extended_hours=extended_hours,
        odd_lot=odd_lot,
        trade_through_exempt=trade_through_exempt,
        single_price=single_price,
    ), offset


def decode_trade_report(data, offset: int, symbol=str) -> Tuple[TradeReport, int]:
    sale_condition, offset = decode_sale_condition(data, offset)
    timestamp, offset = read_timestamp(data, offset)
    sym, offset = read_padded_text(data, offset, SYMBOL_WIDTH, symbol)
    size, offset = read_u32(data, offset)
    price, offset = read_price(data, offset)
    trade_id, offset = read_i64(data, offset)

    return TradeReport(
        sale_condition=sale_condition,
        timestamp=timestamp,
        symbol=sym,
        size=size,
        price=price,
        id=trade_id,
    ), offset


def opaque_decoder(message_type: MessageType) -> Callable:
    """Build a decoder that skips the body of a known but undecoded type."""
    marker = OpaqueMessage(message_type)
    body_length = message_type.body_length

    def decode(data, offset: int, symbol=str) -> Tuple[OpaqueMessage, int]:
        return marker, offset + body_length

    decode.__name__ = f"decode_{message_type.name.lower()}"
    return decode


SHAPE_DECODERS: Dict[MessageType, Callable] = {
    MessageType.SYSTEM_EVENT: decode_system_event,
    MessageType.QUOTE_UPDATE: decode_quote_update,
    MessageType.TRADE_REPORT: decode_trade_report,
}

for _message_type in MessageType:
    if _message_type.is_opaque:
        SHAPE_DECODERS[_message_type] = opaque_decoder(_message_type)
del _message_type
