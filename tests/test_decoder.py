"""
Tests for tag dispatch and message shape decoders.

CRITICAL TESTS:
1. test_quote_update_reference - Reference quote decodes field for field
2. test_reserved_bits_never_succeed - Reserved bits must reject the message
3. test_truncated_is_incomplete - Short buffers are Incomplete, never Malformed
4. test_unrecognized_tag - Unknown leading byte is reported as such
"""

import sys
from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import (
    QUOTE_UPDATE,
    QUOTE_UPDATE_NS,
    SYSTEM_EVENT,
    SYSTEM_EVENT_NS,
    TRADE_REPORT,
    TRADE_REPORT_NS,
    opaque_vector,
    with_byte,
)
from tops_decoder import decode_message
from tops_decoder.core.errors import (
    DecodeError,
    ErrorCode,
    IncompleteMessage,
    MalformedMessage,
    ReservedBitsError,
    UnrecognizedTag,
)
from tops_decoder.decoder.dispatch import peek_length
from tops_decoder.formats.message_types import DISPATCH_ORDER, MessageType, lookup
from tops_decoder.formats.records import (
    MarketSession,
    OpaqueMessage,
    QuoteUpdate,
    SaleCondition,
    SystemEvent,
    SystemEventKind,
    Timestamp,
    TradeReport,
)
from tops_decoder.formats.symbols import SymbolTable


class TestReferenceVectors:
    """Reference messages decode to the documented values."""

    def test_quote_update_reference(self):
        remaining, msg = decode_message(QUOTE_UPDATE)

        assert len(remaining) == 0
        assert isinstance(msg, QuoteUpdate)
        assert msg.available is True
        assert msg.session == MarketSession.REGULAR
        assert msg.timestamp == Timestamp(QUOTE_UPDATE_NS)
        assert msg.symbol == 'ZIEXT'
        assert msg.bid_size == 9700
        assert msg.bid_price == pytest.approx(99.05)
        assert msg.ask_size == 1000
        assert msg.ask_price == pytest.approx(99.07)

    def test_trade_report_reference(self):
        remaining, msg = decode_message(TRADE_REPORT)

        assert len(remaining) == 0
        assert isinstance(msg, TradeReport)
        assert msg.sale_condition == SaleCondition()
        assert msg.timestamp == Timestamp(TRADE_REPORT_NS)
        assert msg.symbol == 'ZIEXT'
        assert msg.size == 100
        assert msg.price == pytest.approx(99.05)
        assert msg.id == 429_974

    def test_system_event_reference(self):
        remaining, msg = decode_message(SYSTEM_EVENT)

        assert len(remaining) == 0
        assert isinstance(msg, SystemEvent)
        assert msg.kind == SystemEventKind.END_OF_SYSTEM_HOURS
        assert msg.timestamp == Timestamp(SYSTEM_EVENT_NS)
        assert msg.timestamp.isoformat() == '2017-04-17T17:00:00.000000000Z'


class TestSystemEvent:
    """Test system event decoding."""

    @pytest.mark.parametrize("code,kind", [
        (0x4F, SystemEventKind.START_OF_MESSAGES),
        (0x53, SystemEventKind.START_OF_SYSTEM_HOURS),
        (0x52, SystemEventKind.START_OF_REGULAR_HOURS),
        (0x4D, SystemEventKind.END_OF_REGULAR_HOURS),
        (0x45, SystemEventKind.END_OF_SYSTEM_HOURS),
        (0x43, SystemEventKind.END_OF_MESSAGES),
    ])
    def test_event_codes(self, code, kind):
        _, msg = decode_message(with_byte(SYSTEM_EVENT, 1, code))
        assert msg.kind == kind

    def test_halt_code_inside_system_event(self):
        """0x4F is a top-level tag too, but here it is the event code."""
        _, msg = decode_message(with_byte(SYSTEM_EVENT, 1, 0x4F))
        assert isinstance(msg, SystemEvent)

    def test_unknown_event_code_is_malformed(self):
        with pytest.raises(MalformedMessage) as exc_info:
            decode_message(with_byte(SYSTEM_EVENT, 1, 0x58))
        assert exc_info.value.code == ErrorCode.E1003_UNKNOWN_SYSTEM_EVENT

    def test_tag_only_is_incomplete(self):
        with pytest.raises(IncompleteMessage):
            decode_message(b'\x53')


class TestQuoteUpdate:
    """Test quote update flags and layout."""

    def test_not_available_flag(self):
        _, msg = decode_message(with_byte(QUOTE_UPDATE, 1, 0x80))
        assert msg.available is False
        assert msg.session == MarketSession.REGULAR

    def test_out_of_hours_flag(self):
        _, msg = decode_message(with_byte(QUOTE_UPDATE, 1, 0x40))
        assert msg.available is True
        assert msg.session == MarketSession.OUT_OF_HOURS

    @pytest.mark.parametrize("flags", [0x01, 0x02, 0x04, 0x08, 0x10, 0x20, 0x3F, 0xC1, 0xFF])
    def test_reserved_bits_never_succeed(self, flags):
        with pytest.raises(ReservedBitsError):
            decode_message(with_byte(QUOTE_UPDATE, 1, flags))

    def test_bid_ask_asymmetry(self):
        """Bid is size-then-price, ask is price-then-size."""
        patched = bytearray(QUOTE_UPDATE)
        patched[18:22] = (1).to_bytes(4, 'little')       # bid size
        patched[22:30] = (20000).to_bytes(8, 'little')   # bid price
        patched[30:38] = (30000).to_bytes(8, 'little')   # ask price
        patched[38:42] = (4).to_bytes(4, 'little')       # ask size

        _, msg = decode_message(bytes(patched))

        assert msg.bid_size == 1
        assert msg.bid_price == pytest.approx(2.0)
        assert msg.ask_price == pytest.approx(3.0)
        assert msg.ask_size == 4

    def test_interned_symbol(self):
        _, msg = decode_message(QUOTE_UPDATE, symbol=sys.intern)
        assert msg.symbol is sys.intern('ZIEXT')

    def test_symbol_table_handle(self):
        table = SymbolTable()
        _, quote = decode_message(QUOTE_UPDATE, symbol=table.lookup)
        _, trade = decode_message(TRADE_REPORT, symbol=table.lookup)
        assert quote.symbol == trade.symbol == 0
        assert table.name(quote.symbol) == 'ZIEXT'


class TestTradeReport:
    """Test trade report sale condition flags."""

    @pytest.mark.parametrize("flags,field", [
        (0x80, 'intermarket_sweep'),
        (0x40, 'extended_hours'),
        (0x20, 'odd_lot'),
        (0x10, 'trade_through_exempt'),
        (0x08, 'single_price'),
    ])
    def test_single_flag(self, flags, field):
        _, msg = decode_message(with_byte(TRADE_REPORT, 1, flags))
        expected = SaleCondition(**{field: True})
        assert msg.sale_condition == expected

    def test_all_flags(self):
        _, msg = decode_message(with_byte(TRADE_REPORT, 1, 0xF8))
        assert msg.sale_condition == SaleCondition(True, True, True, True, True)

    @pytest.mark.parametrize("flags", [0x01, 0x02, 0x04, 0xFF])
    def test_reserved_bits_rejected(self, flags):
        with pytest.raises(ReservedBitsError):
            decode_message(with_byte(TRADE_REPORT, 1, flags))


class TestOpaqueMessages:
    """Known but undecoded message types."""

    @pytest.mark.parametrize("message_type", [t for t in MessageType if t.is_opaque])
    def test_consumes_exact_length(self, message_type):
        data = opaque_vector(message_type)
        remaining, msg = decode_message(data + b'\x53')

        assert msg == OpaqueMessage(message_type)
        assert msg.message_type == message_type
        assert bytes(remaining) == b'\x53'

    @pytest.mark.parametrize("message_type", [t for t in MessageType if t.is_opaque])
    def test_truncated_opaque_is_incomplete(self, message_type):
        data = opaque_vector(message_type)
        with pytest.raises(IncompleteMessage) as exc_info:
            decode_message(data[:-1])
        assert exc_info.value.needed == message_type.wire_length

    def test_payload_not_interpreted(self):
        _, a = decode_message(opaque_vector(MessageType.TRADE_BREAK, fill=0x00))
        _, b = decode_message(opaque_vector(MessageType.TRADE_BREAK, fill=0xFF))
        assert a == b


class TestDispatch:
    """Test tag dispatch and failure taxonomy."""

    def test_table_lengths(self):
        expected = {
            MessageType.SYSTEM_EVENT: 9,
            MessageType.SECURITY_DIRECTORY: 30,
            MessageType.TRADING_STATUS: 21,
            MessageType.RETAIL_LIQUIDITY_INDICATOR: 17,
            MessageType.OPERATIONAL_HALT_STATUS: 17,
            MessageType.SHORT_SALE_PRICE_TEST_STATUS: 18,
            MessageType.QUOTE_UPDATE: 41,
            MessageType.TRADE_REPORT: 37,
            MessageType.OFFICIAL_PRICE: 25,
            MessageType.TRADE_BREAK: 37,
            MessageType.AUCTION_INFORMATION: 79,
        }
        assert {t: t.body_length for t in MessageType} == expected

    def test_dispatch_order(self):
        order = [layout.message_type for layout in DISPATCH_ORDER]
        assert order[0] == MessageType.SYSTEM_EVENT
        assert order.index(MessageType.SHORT_SALE_PRICE_TEST_STATUS) < order.index(MessageType.QUOTE_UPDATE)
        assert order.index(MessageType.QUOTE_UPDATE) < order.index(MessageType.TRADE_REPORT)
        assert order[-1] == MessageType.AUCTION_INFORMATION

    def test_lookup_unknown(self):
        assert lookup(0xFF) is None

    def test_truncated_is_incomplete(self):
        with pytest.raises(IncompleteMessage) as exc_info:
            decode_message(QUOTE_UPDATE[:5])
        assert exc_info.value.needed == 42
        assert exc_info.value.available == 5
        assert exc_info.value.message_type == 'QUOTE_UPDATE'
        assert exc_info.value.recoverable is True

    @pytest.mark.parametrize("data", [QUOTE_UPDATE, TRADE_REPORT, SYSTEM_EVENT])
    def test_every_prefix_is_incomplete(self, data):
        for cut in range(len(data)):
            with pytest.raises(IncompleteMessage):
                decode_message(data[:cut])

    def test_truncated_with_bad_flags_is_incomplete(self):
        """The length check comes before field validation."""
        with pytest.raises(IncompleteMessage):
            decode_message(with_byte(QUOTE_UPDATE, 1, 0xFF)[:20])

    def test_empty_is_incomplete(self):
        with pytest.raises(IncompleteMessage):
            decode_message(b'')

    def test_unrecognized_tag(self):
        with pytest.raises(UnrecognizedTag) as exc_info:
            decode_message(b'\xff' + b'\x00' * 50)
        assert exc_info.value.tag == 0xFF
        assert exc_info.value.code == ErrorCode.E1005_UNRECOGNIZED_TAG
        assert exc_info.value.recoverable is False

    def test_errors_share_base(self):
        for data in (b'', b'\xff', with_byte(QUOTE_UPDATE, 1, 0x01)):
            with pytest.raises(DecodeError):
                decode_message(data)

    def test_error_to_dict(self):
        with pytest.raises(UnrecognizedTag) as exc_info:
            decode_message(b'\xff')
        d = exc_info.value.to_dict()
        assert d['code'] == 'E1005'
        assert d['context'] == {'tag': '0xFF'}

    def test_remaining_is_tail(self):
        remaining, msg = decode_message(QUOTE_UPDATE + TRADE_REPORT)
        assert isinstance(msg, QuoteUpdate)
        assert bytes(remaining) == TRADE_REPORT

        remaining, msg = decode_message(remaining)
        assert isinstance(msg, TradeReport)
        assert len(remaining) == 0

    def test_accepts_bytearray_and_memoryview(self):
        _, a = decode_message(bytearray(QUOTE_UPDATE))
        _, b = decode_message(memoryview(QUOTE_UPDATE))
        assert a == b

    @pytest.mark.parametrize("fmt", ['c', 'b'])
    def test_accepts_any_byte_format(self, fmt):
        _, msg = decode_message(memoryview(SYSTEM_EVENT).cast(fmt))
        assert msg == decode_message(SYSTEM_EVENT)[1]
        assert peek_length(memoryview(QUOTE_UPDATE).cast(fmt)) == 42

    def test_signed_view_of_unknown_tag(self):
        with pytest.raises(UnrecognizedTag) as exc_info:
            decode_message(memoryview(b'\xff').cast('b'))
        assert exc_info.value.tag == 0xFF

    def test_peek_length(self):
        assert peek_length(QUOTE_UPDATE[:1]) == 42
        assert peek_length(TRADE_REPORT) == 38
        with pytest.raises(UnrecognizedTag):
            peek_length(b'\xff')
        with pytest.raises(IncompleteMessage):
            peek_length(b'')


class TestPurity:
    """The decoder holds no state between calls."""

    def test_idempotent(self):
        first = decode_message(QUOTE_UPDATE)[1]
        second = decode_message(QUOTE_UPDATE)[1]
        assert first == second
        assert hash(first) == hash(second)

    def test_records_are_immutable(self):
        _, msg = decode_message(TRADE_REPORT)
        with pytest.raises(AttributeError):
            msg.size = 1

    def test_concurrent_decode(self):
        buffers = [QUOTE_UPDATE, TRADE_REPORT, SYSTEM_EVENT] * 50
        expected = [decode_message(b)[1] for b in buffers]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda b: decode_message(b)[1], buffers))

        assert results == expected

    def test_to_dict(self):
        _, msg = decode_message(QUOTE_UPDATE)
        d = msg.to_dict()
        assert d['type'] == 'QUOTE_UPDATE'
        assert d['symbol'] == 'ZIEXT'
        assert d['timestamp_ns'] == QUOTE_UPDATE_NS
        assert d['session'] == 'regular'
