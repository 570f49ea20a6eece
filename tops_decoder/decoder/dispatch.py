"""
Tag dispatcher.

Selects a shape decoder from the leading tag byte and decodes exactly one
message. The function is pure: no state survives between calls, so the
same buffer always decodes to an equal record and any number of threads
may decode independent buffers concurrently.
"""

from typing import Callable, Tuple

from ..core.errors import IncompleteMessage, UnrecognizedTag
from ..formats import message_types
from ..formats.records import Message
from .shapes import SHAPE_DECODERS


def _byte_view(data) -> memoryview:
    """Flat unsigned-byte view of data, whatever its buffer format."""
    view = memoryview(data)
    if view.format != 'B' or view.ndim != 1:
        view = view.cast('B')
    return view


def decode_message(data, symbol: Callable[[str], object] = str) -> Tuple[memoryview, Message]:
    """
    Decode one message from the start of data.

    Args:
        data: Buffer positioned at a message boundary (bytes, bytearray
            or memoryview). It is borrowed, not copied.
        symbol: Factory building the caller's symbol type from the
            trimmed symbol text (str, sys.intern, a table lookup, ...)

    Returns:
        Tuple of (remaining, message) where remaining is a memoryview over
        the unconsumed tail of data

    Raises:
        IncompleteMessage: data ends before the message does (including
            an empty buffer). Buffer more bytes and retry.
        MalformedMessage: The tag matched but a field is invalid
        UnrecognizedTag: The leading byte matches no known message type
    """
    view = _byte_view(data)

    if len(view) == 0:
        raise IncompleteMessage(needed=1, available=0)

    tag = view[0]
    layout = message_types.lookup(tag)
    if layout is None:
        raise UnrecognizedTag(tag)

    wire_length = layout.body_length + 1
    if len(view) < wire_length:
        raise IncompleteMessage(
            needed=wire_length,
            available=len(view),
            message_type=layout.message_type.name,
        )

    decoder = SHAPE_DECODERS[layout.message_type]
    message, offset = decoder(view, 1, symbol)

    assert offset == wire_length, \
        f"{layout.name} decoder consumed {offset} bytes, expected {wire_length}"

    return view[offset:], message


def peek_length(data) -> int:
    """
    Wire length of the message starting at data[0], without decoding it.

    Raises:
        IncompleteMessage: data is empty
        UnrecognizedTag: The leading byte matches no known message type
    """
    view = _byte_view(data)
    if len(view) == 0:
        raise IncompleteMessage(needed=1, available=0)
    layout = message_types.lookup(view[0])
    if layout is None:
        raise UnrecognizedTag(view[0])
    return layout.body_length + 1
