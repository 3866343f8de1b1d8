# learner.py
# The merge loop: pick the most frequent pair, merge it everywhere, update the
# pair table around the merge sites, record the merge. Repeat until no pairs
# are left, the merge limit is hit, or a stop was requested.

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Mapping, Optional, Tuple, Union

from tqdm import tqdm

from .config import LearnerConfig
from .pairs import PairTable
from .symbols import SymbolTable
from .vocab import RankedSymbol, ranked_symbols
from .words import Pair, WordArena


class EngineState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"                 # no pairs left
    STOPPED_BY_LIMIT = "stopped_by_limit"   # merge_limit reached
    STOPPED = "stopped"                     # request_stop() honoured


@dataclass(frozen=True)
class MergeRecord:
    pair: Pair
    resulting_symbol: int
    rank: int
    frequency_at_merge: int


class MergeEngine:
    """
    Drives BPE learning over an initialised WordArena.
    The engine owns the words and the pair table while running; nothing else
    may mutate them until run() returns.
    """

    def __init__(self, words: WordArena, config: Optional[LearnerConfig] = None):
        self.config = config or LearnerConfig()
        self.words = words
        self.symbols: SymbolTable = words.symbols
        self.table = PairTable()
        self.merges: List[MergeRecord] = []
        self.state = EngineState.IDLE
        self._stop_requested = False

    def request_stop(self) -> None:
        """Ask the loop to stop before the next merge starts."""
        self._stop_requested = True

    def run(self, on_merge: Optional[Callable[[MergeRecord], None]] = None) -> List[MergeRecord]:
        if self.state is not EngineState.IDLE:
            raise RuntimeError(f"Engine already ran (state: {self.state.value}); create a new one.")
        self.state = EngineState.RUNNING
        cfg = self.config
        self.table.build_initial(self.words, workers=cfg.workers)

        limit = cfg.merge_limit
        with tqdm(total=limit, desc="merges", disable=not cfg.progress) as bar:
            while True:
                if limit is not None and len(self.merges) >= limit:
                    self.state = EngineState.STOPPED_BY_LIMIT
                    break
                if self._stop_requested:
                    self.state = EngineState.STOPPED
                    break
                record = self._step()
                if record is None:
                    self.state = EngineState.COMPLETED
                    break
                bar.update(1)
                if cfg.verbose:
                    tqdm.write(
                        f"[learner] merge {record.rank}: {self.symbols.text(record.pair[0])!r} + "
                        f"{self.symbols.text(record.pair[1])!r} ({record.frequency_at_merge})"
                    )
                if on_merge is not None:
                    on_merge(record)
        return list(self.merges)

    def _step(self) -> Optional[MergeRecord]:
        top = self.table.top_pair()
        if top is None:
            return None
        pair, frequency = top
        new_sym = self.symbols.merge(*pair)
        affected = self.words.apply_merge(pair, new_sym, candidates=self.table.words_with(pair))
        self.table.update_after_merge(affected, self.words, pair, new_sym)
        record = MergeRecord(pair=pair, resulting_symbol=new_sym, rank=len(self.merges),
                             frequency_at_merge=frequency)
        self.merges.append(record)
        return record


@dataclass
class LearnResult:
    merges: List[MergeRecord]
    state: EngineState
    symbols: SymbolTable
    words: WordArena
    config: LearnerConfig
    table: Optional[PairTable] = None     # pair counts left when the loop ended

    def ranked(self) -> List[RankedSymbol]:
        return ranked_symbols(self.words, self.symbols)

    def merge_texts(self) -> List[Tuple[str, str, int]]:
        """Merges as (left text, right text, frequency), in rank order."""
        text = self.symbols.text
        return [(text(m.pair[0]), text(m.pair[1]), m.frequency_at_merge) for m in self.merges]


def learn(words: Union[Mapping[str, int], Iterable[Tuple[str, int]]],
          config: Optional[LearnerConfig] = None,
          on_merge: Optional[Callable[[MergeRecord], None]] = None) -> LearnResult:
    """Learn BPE merges from {word: count} (or (word, count) pairs)."""
    config = config or LearnerConfig()
    symbols = SymbolTable(end_of_word=config.end_of_word)
    arena = WordArena(symbols, base_unit=config.base_unit)
    arena.initialize(words.items() if isinstance(words, Mapping) else words)
    engine = MergeEngine(arena, config)
    engine.run(on_merge=on_merge)
    return LearnResult(merges=engine.merges, state=engine.state, symbols=symbols,
                       words=arena, config=config, table=engine.table)
