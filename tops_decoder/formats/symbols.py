"""
Symbol representations.

The decoder never fixes how a symbol is stored. Callers pass a factory that
builds their preferred type from the trimmed symbol text:

    decode_message(data, symbol=str)          # plain string
    decode_message(data, symbol=sys.intern)   # interned string
    decode_message(data, symbol=table.lookup) # symbol-table handle

Named factories are provided for configuration files and the CLI.
"""

import sys
from typing import Callable, Dict


def _as_bytes(text: str) -> bytes:
    return text.encode('utf-8')


SYMBOL_FACTORIES: Dict[str, Callable[[str], object]] = {
    'str': str,
    'interned': sys.intern,
    'bytes': _as_bytes,
}


def get_symbol_factory(name: str) -> Callable[[str], object]:
    """
    Look up a named symbol factory.

    Raises:
        ValueError: If the name is not registered
    """
    try:
        return SYMBOL_FACTORIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown symbol type: {name!r} "
            f"(expected one of {', '.join(sorted(SYMBOL_FACTORIES))})"
        ) from None


class SymbolTable:
    """
    Interning table mapping symbol text to small integer handles.

    Usage:
        table = SymbolTable()
        _, msg = decode_message(data, symbol=table.lookup)
        table.name(msg.symbol)  # "ZIEXT"
    """

    def __init__(self):
        self._ids: Dict[str, int] = {}
        self._names: list = []

    def lookup(self, text: str) -> int:
        """Return the handle for text, assigning a new one if needed."""
        handle = self._ids.get(text)
        if handle is None:
            handle = len(self._names)
            self._ids[text] = handle
            self._names.append(text)
        return handle

    def name(self, handle: int) -> str:
        return self._names[handle]

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, text: str) -> bool:
        return text in self._ids
