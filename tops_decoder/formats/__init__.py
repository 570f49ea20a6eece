"""TOPS wire format definitions and records.

TopsReader lives in formats.reader and is imported separately; it depends
on the decoder package, which in turn depends on this one.
"""

from .message_types import MessageType, MessageLayout, DISPATCH_ORDER, LAYOUTS
from .records import (
    Timestamp,
    SystemEventKind,
    SystemEvent,
    MarketSession,
    QuoteUpdate,
    SaleCondition,
    TradeReport,
    OpaqueMessage,
    Message,
)
from .symbols import SYMBOL_FACTORIES, SymbolTable, get_symbol_factory
from .encoder import encode_message

__all__ = [
    'MessageType',
    'MessageLayout',
    'DISPATCH_ORDER',
    'LAYOUTS',
    'Timestamp',
    'SystemEventKind',
    'SystemEvent',
    'MarketSession',
    'QuoteUpdate',
    'SaleCondition',
    'TradeReport',
    'OpaqueMessage',
    'Message',
    'SYMBOL_FACTORIES',
    'SymbolTable',
    'get_symbol_factory',
    'encode_message',
]
