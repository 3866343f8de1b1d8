# corpus.py
# Turning raw text into {word: count} for the learner.
#
# Article dumps look like:
#     <preamble lines...>
#     @@1514 Albert of Prussia ...
#     @@1515 ...
# Every line after the preamble must start with "@@", a numeric id and a space.

from __future__ import annotations
import random
from collections import Counter
from dataclasses import dataclass
from itertools import groupby
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

ARTICLE_PREFIX = "@@"


class CorpusFormatError(ValueError):
    pass


def parse_article_line(line: str) -> Tuple[int, str]:
    if not line.startswith(ARTICLE_PREFIX):
        raise CorpusFormatError(f"Line does not start with {ARTICLE_PREFIX}: {line[:60]!r}")
    rest = line[len(ARTICLE_PREFIX):]
    digits = 0
    while digits < len(rest) and rest[digits].isascii() and rest[digits].isdigit():
        digits += 1
    if digits == 0:
        raise CorpusFormatError(f"Missing numeric id after {ARTICLE_PREFIX}: {line[:60]!r}")
    if digits >= len(rest) or rest[digits] != " ":
        raise CorpusFormatError(f"Expected a space after the id: {line[:60]!r}")
    return int(rest[:digits]), rest[digits + 1:]


def iter_articles(lines: Iterable[str]) -> Iterator[Tuple[int, str]]:
    """Yield (id, text) per article line, skipping the preamble and blank lines."""
    in_body = False
    for line in lines:
        line = line.rstrip("\r\n")
        if not in_body:
            if not line.startswith(ARTICLE_PREFIX):
                continue
            in_body = True
        if not line.strip():
            continue
        yield parse_article_line(line)


def read_articles(path) -> Iterator[Tuple[int, str]]:
    with open(path, "r", encoding="utf-8") as f:
        yield from iter_articles(f)


def alphabetic_words(text: str) -> Iterator[str]:
    """Maximal runs of alphabetic characters, lowercased."""
    for is_alpha, run in groupby(text, key=str.isalpha):
        if is_alpha:
            yield "".join(run).lower()


def build_dictionary(texts: Iterable[str], min_count: int = 1) -> Dict[str, int]:
    """Count alphabetic words over all texts; most frequent first, rare words dropped."""
    counts: Counter = Counter()
    for text in texts:
        counts.update(alphabetic_words(text))
    return {w: c for w, c in counts.most_common() if c >= min_count}


def whitespace_words(text: str, min_count: int = 1) -> Dict[str, int]:
    """Whitespace pre-tokenisation: every whitespace-separated chunk is a word."""
    counts = Counter(text.split())
    return {w: c for w, c in counts.most_common() if c >= min_count}


def char_counts(texts: Iterable[str]) -> List[Tuple[str, int]]:
    """Count of every character in the raw text, most frequent first."""
    counts: Counter = Counter()
    for text in texts:
        counts.update(text)
    return counts.most_common()


@dataclass(frozen=True)
class DictionaryStats:
    words: int
    singletons: int

    @property
    def singleton_percent(self) -> int:
        return int(self.singletons / self.words * 100) if self.words else 0


def dictionary_stats(dictionary: Dict[str, int]) -> DictionaryStats:
    return DictionaryStats(words=len(dictionary), singletons=sum(1 for c in dictionary.values() if c == 1))


def sample_entries(dictionary: Dict[str, int], count: int = 10,
                   seed: Optional[int] = None) -> List[Tuple[str, int]]:
    """The three most frequent entries plus 'count' random ones, in dictionary order."""
    items = list(dictionary.items())
    if not items:
        return []
    rng = random.Random(seed)
    picks = {rng.randrange(len(items)) for _ in range(count)}
    picks.update(range(min(3, len(items))))
    return [items[i] for i in sorted(picks)]
