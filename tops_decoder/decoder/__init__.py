"""Tag dispatch, message shape decoders and the incremental stream."""

from .dispatch import decode_message, peek_length
from .shapes import SHAPE_DECODERS
from .stream import MessageStream, StreamStats

__all__ = [
    'decode_message',
    'peek_length',
    'SHAPE_DECODERS',
    'MessageStream',
    'StreamStats',
]
