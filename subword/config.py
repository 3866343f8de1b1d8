from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .symbols import END_OF_WORD


class LearnerConfig(BaseModel):
    """Settings for one learning run. Frozen: fixed before the words are split."""

    model_config = ConfigDict(frozen=True)

    merge_limit: Optional[int] = Field(default=None, ge=0)  # None -> merge until no pairs are left
    base_unit: Literal["char", "byte"] = "char"
    end_of_word: Optional[str] = END_OF_WORD                 # None -> no marker symbol
    workers: int = Field(default=1, ge=1)                   # threads for the initial pair count
    progress: bool = False
    verbose: bool = False

    @field_validator("end_of_word")
    @classmethod
    def marker_not_empty(cls, v):
        if v is not None and v == "":
            raise ValueError("end_of_word must be a non-empty string or None")
        return v
