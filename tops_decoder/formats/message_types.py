"""
TOPS 1.6 message type table.

Every message begins with a one-byte type tag. Lengths are not carried on
the wire at this layer; each tag implies a fixed body length. This table is
the single source of truth for tags, body lengths and dispatch order.

Body lengths exclude the tag byte:

    Tag   Type                          Body
    0x53  System Event                     9
    0x44  Security Directory              30
    0x48  Trading Status                  21
    0x49  Retail Liquidity Indicator      17
    0x4F  Operational Halt Status         17
    0x50  Short Sale Price Test Status    18
    0x51  Quote Update                    41
    0x54  Trade Report                    37
    0x58  Official Price                  25
    0x42  Trade Break                     37
    0x41  Auction Information             79
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class MessageType(Enum):
    """TOPS 1.6 message types, valued by their tag byte."""
    SYSTEM_EVENT = 0x53
    SECURITY_DIRECTORY = 0x44
    TRADING_STATUS = 0x48
    RETAIL_LIQUIDITY_INDICATOR = 0x49
    OPERATIONAL_HALT_STATUS = 0x4F
    SHORT_SALE_PRICE_TEST_STATUS = 0x50
    QUOTE_UPDATE = 0x51
    TRADE_REPORT = 0x54
    OFFICIAL_PRICE = 0x58
    TRADE_BREAK = 0x42
    AUCTION_INFORMATION = 0x41

    @property
    def tag(self) -> int:
        return self.value

    @property
    def layout(self) -> 'MessageLayout':
        return LAYOUTS[self]

    @property
    def body_length(self) -> int:
        return LAYOUTS[self].body_length

    @property
    def wire_length(self) -> int:
        """Full message size including the tag byte."""
        return LAYOUTS[self].body_length + 1

    @property
    def display_name(self) -> str:
        return LAYOUTS[self].name

    @property
    def is_opaque(self) -> bool:
        """Known type whose payload is skipped rather than decoded."""
        return self in OPAQUE_TYPES


@dataclass(frozen=True)
class MessageLayout:
    """Wire layout of one message type."""
    message_type: MessageType
    body_length: int
    name: str


# Dispatch priority order
DISPATCH_ORDER: Tuple[MessageLayout, ...] = (
    MessageLayout(MessageType.SYSTEM_EVENT, 9, 'System Event'),
    MessageLayout(MessageType.SECURITY_DIRECTORY, 30, 'Security Directory'),
    MessageLayout(MessageType.TRADING_STATUS, 21, 'Trading Status'),
    MessageLayout(MessageType.RETAIL_LIQUIDITY_INDICATOR, 17, 'Retail Liquidity Indicator'),
    MessageLayout(MessageType.OPERATIONAL_HALT_STATUS, 17, 'Operational Halt Status'),
    MessageLayout(MessageType.SHORT_SALE_PRICE_TEST_STATUS, 18, 'Short Sale Price Test Status'),
    MessageLayout(MessageType.QUOTE_UPDATE, 41, 'Quote Update'),
    MessageLayout(MessageType.TRADE_REPORT, 37, 'Trade Report'),
    MessageLayout(MessageType.OFFICIAL_PRICE, 25, 'Official Price'),
    MessageLayout(MessageType.TRADE_BREAK, 37, 'Trade Break'),
    MessageLayout(MessageType.AUCTION_INFORMATION, 79, 'Auction Information'),
)

LAYOUTS: Dict[MessageType, MessageLayout] = {
    layout.message_type: layout for layout in DISPATCH_ORDER
}

OPAQUE_TYPES = frozenset({
    MessageType.SECURITY_DIRECTORY,
    MessageType.TRADING_STATUS,
    MessageType.RETAIL_LIQUIDITY_INDICATOR,
    MessageType.OPERATIONAL_HALT_STATUS,
    MessageType.SHORT_SALE_PRICE_TEST_STATUS,
    MessageType.OFFICIAL_PRICE,
    MessageType.TRADE_BREAK,
    MessageType.AUCTION_INFORMATION,
})


def lookup(tag: int) -> Optional[MessageLayout]:
    """Return the first layout in dispatch order whose tag matches, or None."""
    for layout in DISPATCH_ORDER:
        if layout.message_type.value == tag:
            return layout
    return None


# Every message type must have exactly one layout
assert len(LAYOUTS) == len(MessageType), \
    f"Layout table incomplete: {len(LAYOUTS)} != {len(MessageType)}"
