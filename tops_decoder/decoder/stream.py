"""
Incremental message stream.

MessageStream accumulates bytes as they arrive from a transport and yields
every complete message, holding back a trailing partial message until the
rest of it is fed.

Usage:
    stream = MessageStream()
    for chunk in transport:
        stream.feed(chunk)
        for msg in stream:
            process(msg)
    stream.close()
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List

from ..core.errors import DecodeError, IncompleteMessage, MalformedMessage, UnrecognizedTag
from ..formats.records import Message
from .dispatch import decode_message, peek_length


logger = logging.getLogger(__name__)

ON_ERROR_CHOICES = ('raise', 'skip')


@dataclass
class StreamStats:
    """Running counters for a MessageStream."""
    bytes_fed: int = 0
    bytes_consumed: int = 0
    bytes_skipped: int = 0
    messages: Counter = field(default_factory=Counter)
    errors: Counter = field(default_factory=Counter)

    @property
    def total_messages(self) -> int:
        return sum(self.messages.values())

    def to_dict(self) -> Dict:
        return {
            'bytes_fed': self.bytes_fed,
            'bytes_consumed': self.bytes_consumed,
            'bytes_skipped': self.bytes_skipped,
            'total_messages': self.total_messages,
            'messages': dict(self.messages),
            'errors': dict(self.errors),
        }


class MessageStream:
    """
    Buffering decoder for a byte stream of back-to-back TOPS messages.

    Args:
        symbol: Symbol factory passed through to decode_message
        on_error: 'raise' to propagate malformed/unrecognized data,
            'skip' to log it, drop the offending bytes and continue.
            Malformed messages are dropped by their table length,
            unrecognized tags one byte at a time.
    """

    def __init__(self, symbol: Callable[[str], object] = str, on_error: str = 'raise'):
        if on_error not in ON_ERROR_CHOICES:
            raise ValueError(f"on_error must be one of {ON_ERROR_CHOICES}, got {on_error!r}")
        self.symbol = symbol
        self.on_error = on_error
        self.stats = StreamStats()
        # Immutable buffer plus read offset; decoded views never pin a resizable buffer
        self._buffer = b''
        self._offset = 0

    @property
    def pending(self) -> int:
        """Bytes buffered but not yet decoded."""
        return len(self._buffer) - self._offset

    def feed(self, chunk: bytes) -> None:
        self._buffer = self._buffer[self._offset:] + bytes(chunk)
        self._offset = 0
        self.stats.bytes_fed += len(chunk)

    def __iter__(self) -> Iterator[Message]:
        while self.pending:
            view = memoryview(self._buffer)[self._offset:]
            try:
                remaining, message = decode_message(view, self.symbol)
            except IncompleteMessage:
                return
            except (MalformedMessage, UnrecognizedTag) as e:
                self.stats.errors[e.code.value] += 1
                if self.on_error == 'raise':
                    raise
                self._skip(view, e)
                continue

            consumed = len(view) - len(remaining)
            self._offset += consumed
            self.stats.bytes_consumed += consumed
            self.stats.messages[message.message_type.name] += 1
            yield message

    def drain(self) -> List[Message]:
        """Decode everything currently decodable."""
        return list(self)

    def close(self) -> None:
        """
        Signal end of input.

        Raises:
            IncompleteMessage: A partial message is still buffered
            UnrecognizedTag: The buffered tail does not start with a known tag
        """
        pending = self.pending
        if pending:
            needed = peek_length(memoryview(self._buffer)[self._offset:])
            raise IncompleteMessage(needed=needed, available=pending)

    def _skip(self, view: memoryview, error: DecodeError) -> None:
        if isinstance(error, MalformedMessage):
            count = min(peek_length(view), len(view))
        else:
            count = 1
        logger.warning(f"Skipping {count} byte(s) at stream offset "
                       f"{self.stats.bytes_consumed + self.stats.bytes_skipped}: {error}")
        self._offset += count
        self.stats.bytes_skipped += count
