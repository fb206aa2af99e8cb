from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class KeywordExtractionResult(BaseModel):
    """Structured output from LLM for keyword extraction."""

    keywords: list[str] = Field(default_factory=list)

    @field_validator("keywords")
    @classmethod
    def normalize_keywords(cls, value: list[str]) -> list[str]:
        """Trim whitespace, drop empty values, and de-duplicate keywords."""
        normalized: list[str] = []
        seen: set[str] = set()
        for item in value:
            cleaned = str(item).strip()
            if not cleaned or cleaned.casefold() in seen:
                continue
            seen.add(cleaned.casefold())
            normalized.append(cleaned)
        return normalized
