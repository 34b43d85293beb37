"""Tokenization output model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class TokenizationResult(BaseModel):
    """Tokens of one text field, split into keywords and noise.

    Attributes:
        all_tokens:  Every normalized token in text order (duplicates kept).
        keywords:    Tokens that are not stopwords and longer than 2 chars.
        ignored:     Stopwords and short tokens.
        noise_ratio: ``len(ignored) / len(all_tokens)``; 0.0 for empty text.
    """

    model_config = ConfigDict(frozen=True)

    all_tokens: list[str] = []
    keywords:   list[str] = []
    ignored:    list[str] = []
    noise_ratio: float = 0.0

    @field_validator("noise_ratio")
    @classmethod
    def ratio_in_unit_interval(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"noise_ratio must be in [0, 1], got {v}.")
        return v

    @property
    def is_empty(self) -> bool:
        return not self.all_tokens
