# words.py
# Word arena: one entry per distinct word, holding its current symbol sequence
# and its corpus frequency. Entries are addressed by their index (handle).

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .symbols import SymbolTable

Pair = Tuple[int, int]
PairChange = Tuple[Pair, int]


@dataclass
class WordEntry:
    text: str
    sequence: List[int]
    frequency: int


def merge_sequence(sequence: List[int], pair: Pair, new_sym: int) -> Tuple[List[int], List[PairChange]]:
    """
    Replace all non-overlapping occurrences of 'pair' (leftmost first) by 'new_sym'.
    Returns the new sequence and the pair count changes made at each merge site:
    the merged pair and the pairs with both neighbours go away, the pairs of
    new_sym with its neighbours appear. The left neighbour is taken from the
    output so far, which keeps consecutive merges ("a b a b") consistent.
    """
    left, right = pair
    out: List[int] = []
    changes: List[PairChange] = []
    n = len(sequence)
    i = 0
    while i < n:
        if i < n - 1 and sequence[i] == left and sequence[i + 1] == right:
            changes.append((pair, -1))
            if out:
                prev = out[-1]
                changes.append(((prev, left), -1))
                changes.append(((prev, new_sym), 1))
            if i + 2 < n:
                nxt = sequence[i + 2]
                changes.append(((right, nxt), -1))
                changes.append(((new_sym, nxt), 1))
            out.append(new_sym)
            i += 2
        else:
            out.append(sequence[i])
            i += 1
    return out, changes


class WordArena:
    """Symbol sequences for every distinct word, tagged with corpus frequency."""

    def __init__(self, symbols: SymbolTable, base_unit: str = "char"):
        self.symbols = symbols
        self.base_unit = base_unit
        self.entries: List[WordEntry] = []

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, handle: int) -> WordEntry:
        return self.entries[handle]

    def __iter__(self) -> Iterator[WordEntry]:
        return iter(self.entries)

    def initialize(self, words: Iterable[Tuple[str, int]]) -> None:
        """Seed one entry per (word, frequency), split into base units plus the marker."""
        use_marker = self.symbols.end_of_word is not None
        for text, frequency in words:
            if not text:
                raise ValueError("Empty words cannot be learned from; filter them out when loading.")
            if frequency <= 0:
                raise ValueError(f"Word {text!r} has frequency {frequency}; frequencies must be positive.")
            seq = self.symbols.split(text, self.base_unit)
            if use_marker:
                seq.append(self.symbols.marker())
            self.entries.append(WordEntry(text=text, sequence=seq, frequency=int(frequency)))

    def mass(self) -> int:
        """Frequency-weighted number of symbol occurrences over all words."""
        return sum(e.frequency * len(e.sequence) for e in self.entries)

    def apply_merge(self, pair: Pair, new_sym: int,
                    candidates: Optional[Iterable[int]] = None) -> Dict[int, List[PairChange]]:
        """
        Merge 'pair' into 'new_sym' in every candidate word (all words by default).
        Returns {word handle: pair changes} for the words that changed, by ascending handle.
        """
        handles = range(len(self.entries)) if candidates is None else sorted(candidates)
        affected: Dict[int, List[PairChange]] = {}
        for h in handles:
            entry = self.entries[h]
            if len(entry.sequence) < 2:
                continue
            out, changes = merge_sequence(entry.sequence, pair, new_sym)
            if changes:
                entry.sequence[:] = out
                affected[h] = changes
        return affected
