"""
subword: byte-pair-encoding vocabulary learning.

Example:
    from subword import LearnerConfig, learn
    result = learn({"low": 5, "lower": 2, "newest": 6, "widest": 3},
                   LearnerConfig(merge_limit=10))
    for sym in result.ranked():
        print(sym.frequency, sym.symbol_text)
"""
from .config import LearnerConfig
from .learner import EngineState, LearnResult, MergeEngine, MergeRecord, learn
from .pairs import PairTable, PairTableDesync
from .symbols import SymbolTable
from .vocab import LearnedVocab, RankedSymbol, ranked_symbols
from .words import WordArena, WordEntry

__all__ = [
    "LearnerConfig",
    "EngineState",
    "LearnResult",
    "MergeEngine",
    "MergeRecord",
    "learn",
    "PairTable",
    "PairTableDesync",
    "SymbolTable",
    "LearnedVocab",
    "RankedSymbol",
    "ranked_symbols",
    "WordArena",
    "WordEntry",
]
