from collections import Counter

import pytest

from subword.symbols import SymbolTable
from subword.words import WordArena, merge_sequence


def pair_counts(seq):
    return Counter(zip(seq, seq[1:]))


def net(changes):
    total = Counter()
    for pair, d in changes:
        total[pair] += d
    return {p: d for p, d in total.items() if d}


@pytest.mark.parametrize(
    "seq, expected",
    [
        ([1, 1, 1], [9, 1]),
        ([1, 1, 1, 1], [9, 9]),
        ([1, 2, 1, 1, 1], [1, 2, 9, 1]),
        ([2, 1, 1, 2], [2, 9, 2]),
    ],
)
def test_merge_is_leftmost_and_non_overlapping(seq, expected):
    out, _ = merge_sequence(seq, (1, 1), 9)
    assert out == expected


@pytest.mark.parametrize(
    "seq, pair",
    [
        ([1, 1, 1], (1, 1)),
        ([1, 1, 1, 1], (1, 1)),
        ([1, 2, 1, 2], (1, 2)),
        ([3, 1, 2, 1, 2, 4], (1, 2)),
        ([1, 2, 3, 1, 2], (1, 2)),
        ([2, 1, 1, 2, 1, 1], (1, 1)),
    ],
)
def test_changes_match_a_recount(seq, pair):
    out, changes = merge_sequence(seq, pair, 9)
    before, after = pair_counts(seq), pair_counts(out)
    expected = {p: after[p] - before[p] for p in set(before) | set(after) if after[p] != before[p]}
    assert net(changes) == expected


def test_no_occurrence_means_no_changes():
    out, changes = merge_sequence([1, 2, 3], (3, 1), 9)
    assert out == [1, 2, 3]
    assert changes == []


def make_arena(words, **kw):
    table = SymbolTable(end_of_word=kw.pop("end_of_word", "</w>"))
    arena = WordArena(table, **kw)
    arena.initialize(words)
    return arena


def test_initialize_appends_marker():
    arena = make_arena([("low", 5), ("a", 1)])
    assert [arena.symbols.text(s) for s in arena[0].sequence] == ["l", "o", "w", "</w>"]
    assert arena[1].sequence[-1] == arena[0].sequence[-1]
    assert arena.mass() == 5 * 4 + 1 * 2


def test_initialize_without_marker():
    arena = make_arena([("low", 5)], end_of_word=None)
    assert len(arena[0].sequence) == 3


def test_initialize_rejects_bad_entries():
    with pytest.raises(ValueError):
        make_arena([("", 3)])
    with pytest.raises(ValueError):
        make_arena([("abc", 0)])


def test_apply_merge_reports_changed_words_only():
    arena = make_arena([("abab", 2), ("cd", 4), ("xab", 1)])
    a, b = arena[0].sequence[:2]
    ab = arena.symbols.merge(a, b)
    affected = arena.apply_merge((a, b), ab)
    assert list(affected) == [0, 2]
    assert arena[0].sequence[:2] == [ab, ab]
    assert [e.frequency for e in arena] == [2, 4, 1]


def test_apply_merge_limits_to_candidates():
    arena = make_arena([("ab", 1), ("ab", 1)])
    a, b = arena[0].sequence[:2]
    ab = arena.symbols.merge(a, b)
    affected = arena.apply_merge((a, b), ab, candidates=[1])
    assert list(affected) == [1]
    assert arena[0].sequence[0] == a
