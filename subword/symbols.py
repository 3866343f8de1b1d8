# symbols.py
# Interned symbols for BPE learning. Every symbol is an integer handle into a
# SymbolTable, so pair comparisons are int comparisons and the byte content of
# a symbol is stored exactly once.

from __future__ import annotations
from typing import Dict, List, Optional, Tuple

END_OF_WORD = "</w>"     # sentinel so merges don't cross words
BASE_UNITS = ("char", "byte")

# (content bytes, ends_word)
SymbolKey = Tuple[bytes, bool]


class SymbolTable:
    """
    Stores a unique list of symbols so they can be referred to by stable indexes.
    - A symbol is its byte content plus a flag telling whether it closes a word
      (i.e. it has absorbed the end-of-word marker).
    - The marker itself is the empty content with the flag set, so it can never
      collide with a symbol built from the literal characters "</w>".
    - Handles are handed out in first-appearance order.
    """

    def __init__(self, end_of_word: Optional[str] = END_OF_WORD):
        self.end_of_word = end_of_word
        self._keys: List[SymbolKey] = []
        self._index: Dict[SymbolKey, int] = {}

    def __len__(self) -> int:
        return len(self._keys)

    def intern(self, content: bytes, ends_word: bool = False) -> int:
        """Return the handle for (content, ends_word), creating it on first use."""
        key = (bytes(content), ends_word)
        sym = self._index.get(key)
        if sym is None:
            sym = len(self._keys)
            self._keys.append(key)
            self._index[key] = sym
        return sym

    def marker(self) -> int:
        if self.end_of_word is None:
            raise RuntimeError("This symbol table was created without an end-of-word marker.")
        return self.intern(b"", ends_word=True)

    def merge(self, left: int, right: int) -> int:
        """Mint (or look up) the symbol for the concatenation left+right."""
        lcontent, lends = self._keys[left]
        rcontent, rends = self._keys[right]
        if lends:
            raise ValueError(
                f"Cannot merge {self.text(left)!r} with {self.text(right)!r}: "
                "the left symbol already ends a word."
            )
        return self.intern(lcontent + rcontent, ends_word=rends)

    def content(self, sym: int) -> bytes:
        return self._keys[sym][0]

    def ends_word(self, sym: int) -> bool:
        return self._keys[sym][1]

    def text(self, sym: int) -> str:
        """Human-readable form. Byte-level composites may split a UTF-8 sequence."""
        content, ends = self._keys[sym]
        s = content.decode("utf-8", errors="backslashreplace")
        if ends:
            s += self.end_of_word or ""
        return s

    def split(self, word: str, base_unit: str = "char") -> List[int]:
        """Split a word into base-unit symbols (no marker)."""
        if base_unit == "char":
            return [self.intern(ch.encode("utf-8")) for ch in word]
        if base_unit == "byte":
            return [self.intern(bytes([b])) for b in word.encode("utf-8")]
        raise ValueError(f"Unknown base unit {base_unit!r}; expected one of {BASE_UNITS}.")
