from collections import Counter

import pytest
from pydantic import ValidationError

from subword.config import LearnerConfig
from subword.learner import EngineState, MergeEngine, learn
from subword.symbols import SymbolTable
from subword.words import WordArena

CORPUS = {"low": 5, "lower": 2, "newest": 6, "widest": 3}
TEXT = ("the cat sat on the mat and the bat sat on the hat while a rat ran at "
        "that cat banana bandana mississippi aaaa aaa abab")


def text_corpus():
    return Counter(TEXT.split())


def make_engine(words, **cfg):
    config = LearnerConfig(**cfg)
    arena = WordArena(SymbolTable(end_of_word=config.end_of_word), base_unit=config.base_unit)
    arena.initialize(words.items())
    return MergeEngine(arena, config)


def recount(arena):
    counts = Counter()
    for entry in arena:
        for pair in zip(entry.sequence, entry.sequence[1:]):
            counts[pair] += entry.frequency
    return counts


def test_first_merges_on_the_classic_example():
    result = learn(CORPUS, LearnerConfig(merge_limit=4))
    assert result.merge_texts() == [
        ("e", "s", 9),
        ("t", "</w>", 9),
        ("es", "t</w>", 9),
        ("l", "o", 7),
    ]
    assert result.state is EngineState.STOPPED_BY_LIMIT


def test_frequency_at_merge_is_the_weighted_pair_count():
    engine = make_engine(CORPUS, merge_limit=1)
    s = engine.symbols
    e, st = s.intern(b"e"), s.intern(b"s")
    before = recount(engine.words)[(e, st)]
    (record,) = engine.run()
    assert record.pair == (e, st)
    assert record.frequency_at_merge == before == 6 + 3


def test_runs_to_completion():
    result = learn(CORPUS)
    assert result.state is EngineState.COMPLETED
    assert all(len(e.sequence) == 1 for e in result.words)
    assert [(r.symbol_text, r.frequency) for r in result.ranked()] == [
        ("newest</w>", 6), ("low</w>", 5), ("widest</w>", 3), ("lower</w>", 2),
    ]


def test_identical_input_gives_identical_merges():
    a = learn(text_corpus(), LearnerConfig(merge_limit=25))
    b = learn(text_corpus(), LearnerConfig(merge_limit=25))
    assert a.merges == b.merges
    assert a.merge_texts() == b.merge_texts()


def test_workers_do_not_change_the_result():
    a = learn(text_corpus())
    b = learn(text_corpus(), LearnerConfig(workers=4))
    assert a.merge_texts() == b.merge_texts()


def test_ranks_start_at_zero_without_gaps():
    result = learn(text_corpus())
    assert [m.rank for m in result.merges] == list(range(len(result.merges)))


def test_mass_drops_by_the_merges_applied():
    engine = make_engine(text_corpus())
    masses = [engine.words.mass()]
    symbol_counts = []

    def occurrences(sym):
        return sum(e.frequency * e.sequence.count(sym) for e in engine.words)

    def on_merge(record):
        masses.append(engine.words.mass())
        symbol_counts.append(occurrences(record.resulting_symbol))

    engine.run(on_merge=on_merge)
    assert len(masses) == len(engine.merges) + 1
    for i, record in enumerate(engine.merges):
        drop = masses[i] - masses[i + 1]
        assert drop > 0
        # a freshly minted symbol exists only where this merge put it
        if all(m.resulting_symbol != record.resulting_symbol for m in engine.merges[:i]):
            assert drop == symbol_counts[i]


def test_each_selection_is_a_maximum():
    engine = make_engine(text_corpus())
    expected = [max(recount(engine.words).values())]

    def on_merge(record):
        counts = recount(engine.words)
        assert dict(engine.table.items()) == dict(counts)
        expected.append(max(counts.values()) if counts else None)

    engine.run(on_merge=on_merge)
    assert [m.frequency_at_merge for m in engine.merges] == expected[:-1]
    assert expected[-1] is None


def test_merges_never_cross_word_boundaries():
    words = {"ab": 10, "ba": 10, "b": 50}
    result = learn(words, LearnerConfig(end_of_word=None))
    texts = {result.symbols.text(m.resulting_symbol) for m in result.merges}
    assert texts == {"ab", "ba"}

    marked = learn(words)
    for m in marked.merges:
        assert not marked.symbols.ends_word(m.pair[0])


def test_zero_limit_stops_immediately():
    result = learn(CORPUS, LearnerConfig(merge_limit=0))
    assert result.state is EngineState.STOPPED_BY_LIMIT
    assert result.merges == []
    ranked = {r.symbol_text: r.frequency for r in result.ranked()}
    assert ranked["e"] == 2 + 2 * 6 + 3
    assert ranked["</w>"] == sum(CORPUS.values())


def test_empty_corpus_completes():
    result = learn({})
    assert result.state is EngineState.COMPLETED
    assert result.merges == []
    assert result.ranked() == []


def test_stop_is_honoured_between_merges():
    engine = make_engine(text_corpus())

    def on_merge(record):
        if record.rank == 2:
            engine.request_stop()

    merges = engine.run(on_merge=on_merge)
    assert len(merges) == 3
    assert engine.state is EngineState.STOPPED


def test_engine_runs_once():
    engine = make_engine(CORPUS, merge_limit=1)
    engine.run()
    with pytest.raises(RuntimeError):
        engine.run()


def test_byte_units_learn_multibyte_characters():
    result = learn({"été": 4, "thé": 2}, LearnerConfig(base_unit="byte", merge_limit=1))
    (record,) = result.merges
    assert result.symbols.text(record.resulting_symbol) == "é"
    assert record.frequency_at_merge == 4 * 2 + 2


def test_invalid_config():
    with pytest.raises(ValidationError):
        LearnerConfig(merge_limit=-1)
    with pytest.raises(ValidationError):
        LearnerConfig(base_unit="word")
    with pytest.raises(ValidationError):
        LearnerConfig(end_of_word="")


def test_verbose_reports_each_merge(capsys):
    learn(CORPUS, LearnerConfig(merge_limit=1, verbose=True))
    assert "[learner] merge 0: 'e' + 's' (9)" in capsys.readouterr().out


def test_result_carries_the_remaining_pairs():
    result = learn({"abc": 2, "abd": 1}, LearnerConfig(merge_limit=1, end_of_word=None))
    assert result.merge_texts() == [("a", "b", 3)]
    assert [(result.symbols.text(a) + result.symbols.text(b), f) for (a, b), f in result.table.most_common(5)] == [
        ("abc", 2), ("abd", 1),
    ]
    assert learn({}).table.top_pair() is None
