# pairs.py
# Pair frequency table: frequency-weighted counts of adjacent symbol pairs,
# kept current across merges by applying only the changes at each merge site.

from __future__ import annotations
import heapq
from functools import partial
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from tqdm.contrib.concurrent import thread_map

from .words import Pair, PairChange, WordEntry


class PairTableDesync(RuntimeError):
    """The pair table no longer matches the word sequences."""


def _count_chunk(entries: Sequence[WordEntry], handles: range) -> Tuple[Dict[Pair, int], Dict[Pair, List[int]]]:
    """Count adjacent pair frequencies across a slice of the word arena."""
    counts: Dict[Pair, int] = {}
    where: Dict[Pair, List[int]] = {}
    for h in handles:
        entry = entries[h]
        seq = entry.sequence
        for pair in zip(seq, seq[1:]):
            counts[pair] = counts.get(pair, 0) + entry.frequency
            hs = where.setdefault(pair, [])
            if not hs or hs[-1] != h:
                hs.append(h)
    return counts, where


def _chunks(n: int, parts: int) -> List[range]:
    size = max(1, -(-n // parts))
    return [range(i, min(i + size, n)) for i in range(0, n, size)]


class PairTable:
    """
    Pair -> aggregate frequency, plus:
    - a lazy max-heap of (-count, discovery order, pair) for selecting the top pair,
    - back-references pair -> word handles that (may) contain the pair.

    Ties go to the pair discovered first. A pair whose count drops to zero leaves
    the table; if it shows up again it is discovered anew.
    """

    # rebuild the heap when stale entries outnumber live ones by this factor
    COMPACT_FACTOR = 4

    def __init__(self):
        self._counts: Dict[Pair, int] = {}
        self._order: Dict[Pair, int] = {}
        self._where: Dict[Pair, Set[int]] = {}
        self._heap: List[Tuple[int, int, Pair]] = []
        self._next_order = 0
        self._built = False

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, pair: Pair) -> bool:
        return pair in self._counts

    def count(self, pair: Pair) -> int:
        return self._counts.get(pair, 0)

    def items(self):
        return self._counts.items()

    def words_with(self, pair: Pair) -> List[int]:
        return sorted(self._where.get(pair, ()))

    # ------------- Building -------------

    def build_initial(self, words: Iterable[WordEntry], workers: int = 1) -> None:
        """Count every adjacent pair, weighted by word frequency. Chunks are summed in order."""
        if self._built:
            raise RuntimeError("Pair table is already built; it is only ever updated incrementally.")
        entries = list(words)
        if workers > 1 and len(entries) > 1:
            partials = thread_map(
                partial(_count_chunk, entries),
                _chunks(len(entries), workers),
                max_workers=workers,
                disable=True,
            )
        else:
            partials = [_count_chunk(entries, range(len(entries)))]

        for counts, where in partials:
            for pair, freq in counts.items():
                self._add(pair, freq)
            for pair, handles in where.items():
                self._where.setdefault(pair, set()).update(handles)
        self._built = True

    # ------------- Selection -------------

    def top_pair(self) -> Optional[Tuple[Pair, int]]:
        """Most frequent pair and its count, or None when no pairs are left."""
        heap = self._heap
        while heap:
            neg, order, pair = heap[0]
            if self._counts.get(pair) == -neg and self._order.get(pair) == order:
                return pair, -neg
            heapq.heappop(heap)
        return None

    def most_common(self, n: int) -> List[Tuple[Pair, int]]:
        best = heapq.nsmallest(n, self._counts.items(), key=lambda kv: (-kv[1], self._order[kv[0]]))
        return [(pair, freq) for pair, freq in best]

    # ------------- Updating -------------

    def update_after_merge(self, affected: Dict[int, List[PairChange]], words: Sequence[WordEntry],
                           old_pair: Pair, new_sym: int) -> None:
        """Apply the merge-site changes of every affected word, weighted by its frequency."""
        if not affected:
            raise PairTableDesync(
                f"Merging {old_pair} changed no words although the table counts it "
                f"{self.count(old_pair)} times."
            )
        deltas: Dict[Pair, int] = {}
        for h, changes in affected.items():
            weight = words[h].frequency
            local: Dict[Pair, int] = {}
            for pair, d in changes:
                local[pair] = local.get(pair, 0) + d
            for pair, d in local.items():
                if d == 0:
                    continue
                if d > 0:
                    if new_sym not in pair:
                        raise PairTableDesync(f"Merge of {old_pair} created pair {pair} without {new_sym}.")
                    self._where.setdefault(pair, set()).add(h)
                deltas[pair] = deltas.get(pair, 0) + d * weight

        for pair, d in deltas.items():
            self._add(pair, d)

        if old_pair in self._counts:
            raise PairTableDesync(
                f"Pair {old_pair} still has count {self._counts[old_pair]} after being merged everywhere."
            )
        self._where.pop(old_pair, None)

        if len(self._heap) > self.COMPACT_FACTOR * (len(self._counts) + 1):
            self._compact()

    def _add(self, pair: Pair, delta: int) -> None:
        if delta == 0:
            return
        current = self._counts.get(pair, 0)
        new = current + delta
        if new < 0:
            raise PairTableDesync(f"Pair {pair} would drop to {new} (count {current}, change {delta}).")
        if new == 0:
            del self._counts[pair]
            del self._order[pair]
            self._where.pop(pair, None)
            return
        if current == 0:
            self._order[pair] = self._next_order
            self._next_order += 1
        self._counts[pair] = new
        heapq.heappush(self._heap, (-new, self._order[pair], pair))

    def _compact(self) -> None:
        self._heap = [(-c, self._order[p], p) for p, c in self._counts.items()]
        heapq.heapify(self._heap)
