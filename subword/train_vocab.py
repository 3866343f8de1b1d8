import argparse
from pathlib import Path

from .config import LearnerConfig
from .corpus import (build_dictionary, char_counts, dictionary_stats, read_articles, sample_entries,
                     whitespace_words)
from .learner import learn
from .vocab import LearnedVocab, write_dictionary

# words seen once are dropped from article dumps unless --min_count says otherwise
DEFAULT_MIN_COUNT = {"articles": 2, "plain": 1}


def load_texts(path, fmt):
    if fmt == "articles":
        return [text for _, text in read_articles(path)]
    return [Path(path).read_text(encoding="utf-8")]


def load_dictionary(texts, fmt, min_count):
    if fmt == "articles":
        return build_dictionary(texts, min_count=min_count)
    return whitespace_words(" ".join(texts), min_count=min_count)


def main(argv=None):
    ap = argparse.ArgumentParser(description="Learn a BPE subword vocabulary from a text corpus.")
    ap.add_argument("--text", required=True, help="Corpus file.")
    ap.add_argument("--format", choices=["plain", "articles"], default="plain",
                    help="plain: whitespace-separated words; articles: '@@<id> text' lines, alphabetic words.")
    ap.add_argument("--min_count", type=int, default=None,
                    help="Drop words seen fewer times than this (default: 2 for articles, 1 for plain).")
    ap.add_argument("--merges", type=int, default=None, help="Merge limit (default: until no pairs are left).")
    ap.add_argument("--base_unit", choices=["char", "byte"], default="char")
    ap.add_argument("--end_of_word", type=str, default="</w>")
    ap.add_argument("--no_marker", action="store_true", help="Do not append an end-of-word marker.")
    ap.add_argument("--workers", type=int, default=1)
    ap.add_argument("--out", required=True, help="Dictionary file: '<count> <symbol>' per line.")
    ap.add_argument("--json", type=str, default=None, help="Also save merges + symbols as JSON.")
    ap.add_argument("--char_counts", action="store_true", help="Print the count of every character in the text.")
    ap.add_argument("--report_pairs", type=int, default=0, help="Print the N most frequent pairs left.")
    ap.add_argument("--print_symbols", action="store_true", help="Print every learned symbol with its count.")
    ap.add_argument("--sample", type=int, default=10, help="Random dictionary entries to print.")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--verbose", action="store_true", help="Print every merge.")
    ap.add_argument("--no_progress", action="store_true")
    args = ap.parse_args(argv)

    config = LearnerConfig(
        merge_limit=args.merges,
        base_unit=args.base_unit,
        end_of_word=None if args.no_marker else args.end_of_word,
        workers=args.workers,
        progress=not args.no_progress,
        verbose=args.verbose,
    )
    min_count = DEFAULT_MIN_COUNT[args.format] if args.min_count is None else args.min_count

    print(f"[corpus] reading {args.text} ({args.format})")
    texts = load_texts(args.text, args.format)
    if args.char_counts:
        print("[corpus] character counts:")
        for ch, freq in char_counts(texts):
            print(f"  {ch!r}: {freq}")

    dictionary = load_dictionary(texts, args.format, min_count)
    stats = dictionary_stats(dictionary)
    print(f"[corpus] {stats.words} words, {stats.singletons} with a frequency of 1 ({stats.singleton_percent}%)")
    if args.sample:
        print("[corpus] sample of words in dictionary:")
        for word, freq in sample_entries(dictionary, args.sample, seed=args.seed):
            print(f"  {word}: {freq}")

    result = learn(dictionary, config)
    print(f"[learner] {len(result.merges)} merges, finished: {result.state.value}")

    if args.report_pairs:
        text = result.symbols.text
        print(f"[learner] pairs left: {len(result.table)}")
        for (a, b), freq in result.table.most_common(args.report_pairs):
            print(f"  {text(a) + text(b)!r} - {freq}")

    ranked = result.ranked()
    print(f"[vocab] {len(ranked)} symbols")
    if args.print_symbols:
        for sym in ranked:
            print(f"  {sym.frequency} - {sym.symbol_text!r}")
    write_dictionary(args.out, ranked)
    print(f"[vocab] wrote {args.out}")
    if args.json:
        LearnedVocab.from_result(result).save(args.json)
        print(f"[vocab] saved merges to {args.json}")
    return 0


if __name__ == "__main__":
    main()
