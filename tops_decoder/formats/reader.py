"""
TopsReader - read TOPS messages from capture files.

A capture file here is a plain concatenation of TOPS messages with no
framing (transport headers already stripped). Files are read in chunks and
fed through a MessageStream, so arbitrarily large captures never need to be
held in memory at once.
"""

import logging
from collections import Counter
from pathlib import Path
from typing import Callable, Iterator, Union

from ..decoder.stream import MessageStream, StreamStats
from .records import Message


logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class TopsReader:
    """
    High-level interface for reading capture files.

    Usage:
        for msg in TopsReader.read_path(path):
            process(msg)

        counts = TopsReader.count(path)
        stats = TopsReader.summarize(path, on_error='skip')
    """

    @classmethod
    def read_path(
        cls,
        path: Union[Path, str],
        symbol: Callable[[str], object] = str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        on_error: str = 'raise',
    ) -> Iterator[Message]:
        """
        Yield every message in a capture file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            IncompleteMessage: The file ends partway through a message
            MalformedMessage, UnrecognizedTag: Bad data with on_error='raise'
        """
        stream = MessageStream(symbol=symbol, on_error=on_error)
        yield from cls.stream_path(path, stream, chunk_size)

    @classmethod
    def stream_path(
        cls,
        path: Union[Path, str],
        stream: MessageStream,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> Iterator[Message]:
        """
        Feed a capture file through a caller-owned stream, yielding messages.

        The stream is closed at end of file; its stats stay readable.
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Capture file not found: {path}")
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        with open(path, 'rb') as f:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    break
                stream.feed(chunk)
                yield from stream

        stream.close()
        logger.debug(f"Read {stream.stats.total_messages} messages from {path}")

    @classmethod
    def read_bytes(
        cls,
        data: bytes,
        symbol: Callable[[str], object] = str,
        on_error: str = 'raise',
    ) -> Iterator[Message]:
        """Yield every message in an in-memory buffer."""
        stream = MessageStream(symbol=symbol, on_error=on_error)
        stream.feed(data)
        yield from stream
        stream.close()

    @classmethod
    def summarize(
        cls,
        path: Union[Path, str],
        symbol: Callable[[str], object] = str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        on_error: str = 'raise',
    ) -> StreamStats:
        """Decode a whole capture file, keeping only the stream counters."""
        stream = MessageStream(symbol=symbol, on_error=on_error)
        for _ in cls.stream_path(path, stream, chunk_size):
            pass
        return stream.stats

    @classmethod
    def count(cls, path: Union[Path, str], on_error: str = 'raise') -> Counter:
        """
        Count messages per type without keeping them.

        Returns:
            Counter keyed by MessageType name
        """
        return cls.summarize(path, on_error=on_error).messages
