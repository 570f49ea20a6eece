"""
tops-decoder 1.0 - Decoder for the IEX TOPS 1.6 market-data protocol.

This package provides:
- formats: Message type table, primitive field readers, records, encoder
- decoder: Tag dispatch, message shape decoders, incremental stream
- core: Structured decode errors
- config: YAML configuration with environment variable support
- cli: Command-line interface
"""

__version__ = "1.0.0"

from .core import (
    ErrorCode,
    DecodeError,
    IncompleteMessage,
    MalformedMessage,
    ReservedBitsError,
    UnrecognizedTag,
)
from .formats import (
    MessageType,
    Timestamp,
    SystemEventKind,
    SystemEvent,
    MarketSession,
    QuoteUpdate,
    SaleCondition,
    TradeReport,
    OpaqueMessage,
    Message,
    SymbolTable,
    encode_message,
)
from .decoder import decode_message, MessageStream
from .formats.reader import TopsReader
from .config import TopsConfig, load_config

__all__ = [
    # Version
    '__version__',
    # Errors
    'ErrorCode',
    'DecodeError',
    'IncompleteMessage',
    'MalformedMessage',
    'ReservedBitsError',
    'UnrecognizedTag',
    # Records
    'MessageType',
    'Timestamp',
    'SystemEventKind',
    'SystemEvent',
    'MarketSession',
    'QuoteUpdate',
    'SaleCondition',
    'TradeReport',
    'OpaqueMessage',
    'Message',
    'SymbolTable',
    'encode_message',
    # Decoding
    'decode_message',
    'MessageStream',
    'TopsReader',
    # Config
    'TopsConfig',
    'load_config',
]
