"""Pytest fixtures: reference TOPS 1.6 message vectors."""

import pytest

from tops_decoder.formats.message_types import MessageType


# Quote Update: ZIEXT 9700 @ 99.05 x 1000 @ 99.07
QUOTE_UPDATE = bytes([
    0x51, 0x00, 0xAC, 0x63, 0xC0, 0x20, 0x96, 0x86, 0x6D, 0x14, 0x5A, 0x49, 0x45, 0x58,
    0x54, 0x20, 0x20, 0x20, 0xE4, 0x25, 0x00, 0x00, 0x24, 0x1D, 0x0F, 0x00, 0x00, 0x00,
    0x00, 0x00, 0xEC, 0x1D, 0x0F, 0x00, 0x00, 0x00, 0x00, 0x00, 0xE8, 0x03, 0x00, 0x00,
])
QUOTE_UPDATE_NS = 1471980632572715948

# Trade Report: ZIEXT 100 @ 99.05, trade id 429974
TRADE_REPORT = bytes([
    0x54, 0x00, 0xC3, 0xDF, 0xF7, 0x05, 0xA2, 0x86, 0x6D, 0x14, 0x5A, 0x49, 0x45, 0x58,
    0x54, 0x20, 0x20, 0x20, 0x64, 0x00, 0x00, 0x00, 0x24, 0x1D, 0x0F, 0x00, 0x00, 0x00,
    0x00, 0x00, 0x96, 0x8F, 0x06, 0x00, 0x00, 0x00, 0x00, 0x00,
])
TRADE_REPORT_NS = 1471980683662974915

# System Event: end of system hours
SYSTEM_EVENT = bytes([0x53, 0x45, 0x00, 0xA0, 0x99, 0x97, 0xE9, 0x3D, 0xB6, 0x14])
SYSTEM_EVENT_NS = 1492448400000000000


def opaque_vector(message_type: MessageType, fill: int = 0xAB) -> bytes:
    """Tag byte followed by a filled body of the table length."""
    return bytes([message_type.tag]) + bytes([fill]) * message_type.body_length


def with_byte(data: bytes, index: int, value: int) -> bytes:
    """Copy of data with one byte replaced."""
    patched = bytearray(data)
    patched[index] = value
    return bytes(patched)


@pytest.fixture
def quote_update_bytes() -> bytes:
    return QUOTE_UPDATE


@pytest.fixture
def trade_report_bytes() -> bytes:
    return TRADE_REPORT


@pytest.fixture
def system_event_bytes() -> bytes:
    return SYSTEM_EVENT


@pytest.fixture
def mixed_stream() -> bytes:
    """A short session: start of messages, quote, trade, two opaque records."""
    start = with_byte(SYSTEM_EVENT, 1, 0x4F)
    return (
        start
        + opaque_vector(MessageType.SECURITY_DIRECTORY)
        + QUOTE_UPDATE
        + TRADE_REPORT
        + opaque_vector(MessageType.AUCTION_INFORMATION)
        + SYSTEM_EVENT
    )


@pytest.fixture
def capture_file(tmp_path, mixed_stream):
    """Capture file holding the mixed stream."""
    path = tmp_path / "capture.bin"
    path.write_bytes(mixed_stream)
    return path
