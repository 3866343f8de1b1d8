from typing import Dict, List

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from subword.config import LearnerConfig
from subword.learner import learn

app = FastAPI(title="Subword Vocabulary Server")


class LearnIn(LearnerConfig):
    """Learner settings (validated like LearnerConfig) plus the words to learn from."""

    words: Dict[str, int]


class MergeOut(BaseModel):
    rank: int
    left: str
    right: str
    symbol: str
    frequency: int


class SymbolOut(BaseModel):
    symbol: str
    frequency: int


class LearnOut(BaseModel):
    state: str
    merges: List[MergeOut]
    symbols: List[SymbolOut]


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/learn", response_model=LearnOut)
def learn_vocab(body: LearnIn):
    config = LearnerConfig(**body.model_dump(exclude={"words", "progress", "verbose"}))
    try:
        result = learn(body.words, config)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    text = result.symbols.text
    merges = [
        MergeOut(rank=m.rank, left=text(m.pair[0]), right=text(m.pair[1]),
                 symbol=text(m.resulting_symbol), frequency=m.frequency_at_merge)
        for m in result.merges
    ]
    symbols = [SymbolOut(symbol=s.symbol_text, frequency=s.frequency) for s in result.ranked()]
    return LearnOut(state=result.state.value, merges=merges, symbols=symbols)
