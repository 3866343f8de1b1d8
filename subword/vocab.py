# vocab.py
# Ranked symbol table produced from the final word sequences, plus the two
# on-disk forms: the plain dictionary file and a JSON dump of the merges.

from __future__ import annotations
import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .symbols import SymbolTable
from .words import WordEntry

VERSION = "subword.v1"
COUNT_WIDTH = 12


@dataclass(frozen=True)
class RankedSymbol:
    symbol_text: str
    frequency: int


def symbol_frequencies(words: Iterable[WordEntry]) -> Dict[int, int]:
    """Frequency-weighted occurrences of every symbol still present in the words."""
    freqs: Dict[int, int] = {}
    for entry in words:
        for sym in entry.sequence:
            freqs[sym] = freqs.get(sym, 0) + entry.frequency
    return freqs


def ranked_symbols(words: Iterable[WordEntry], symbols: SymbolTable) -> List[RankedSymbol]:
    """Symbols by descending frequency; equal frequencies keep first-appearance order."""
    freqs = symbol_frequencies(words)
    ordered = sorted(freqs.items(), key=lambda kv: (-kv[1], kv[0]))
    return [RankedSymbol(symbols.text(sym), freq) for sym, freq in ordered]


# ---------------- Dictionary file ----------------

def write_dictionary(path, ranked: Iterable[RankedSymbol]) -> None:
    """One line per symbol: the count left-aligned in a 12-wide column, a space, the symbol."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for r in ranked:
            f.write(f"{r.frequency:<{COUNT_WIDTH}} {r.symbol_text}\n")


def read_dictionary(path) -> List[RankedSymbol]:
    out: List[RankedSymbol] = []
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, 1):
            line = line.rstrip("\n")
            if not line:
                continue
            count = line.split(" ", 1)[0]
            if not count.isdigit():
                raise ValueError(f"{path}:{lineno}: expected a count, got {line!r}")
            text = line[max(COUNT_WIDTH, len(count)) + 1:]
            out.append(RankedSymbol(text, int(count)))
    return out


# ---------------- JSON save / load ----------------

@dataclass
class LearnedVocab:
    base_unit: str
    end_of_word: Optional[str]
    merges: List[Tuple[str, str, int]] = field(default_factory=list)   # (left, right, frequency) in rank order
    symbols: List[RankedSymbol] = field(default_factory=list)
    state: str = ""
    version: str = VERSION

    @classmethod
    def from_result(cls, result) -> "LearnedVocab":
        return cls(
            base_unit=result.config.base_unit,
            end_of_word=result.config.end_of_word,
            merges=result.merge_texts(),
            symbols=result.ranked(),
            state=result.state.value,
        )

    def save(self, path) -> None:
        ser = {
            "meta": {
                "version": self.version,
                "base_unit": self.base_unit,
                "end_of_word": self.end_of_word,
                "num_merges": len(self.merges),
                "state": self.state,
            },
            "merges": [list(m) for m in self.merges],
            "symbols": [asdict(s) for s in self.symbols],
        }
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(ser, f, ensure_ascii=False)

    @classmethod
    def load(cls, path) -> "LearnedVocab":
        with open(path, "r", encoding="utf-8") as f:
            ser = json.load(f)
        meta = ser["meta"]
        if meta.get("version") != VERSION:
            raise ValueError(f"Unsupported vocabulary version {meta.get('version')!r} in {path}")
        return cls(
            base_unit=meta["base_unit"],
            end_of_word=meta["end_of_word"],
            merges=[(a, b, int(freq)) for a, b, freq in ser["merges"]],
            symbols=[RankedSymbol(s["symbol_text"], int(s["frequency"])) for s in ser["symbols"]],
            state=meta.get("state", ""),
            version=meta["version"],
        )
