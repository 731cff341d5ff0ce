"""Models describing the outcome of a title resolution."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class ResolutionOutcome(StrEnum):
    """How a resolution ended."""

    CACHE_HIT = "cache_hit"
    MATCHED = "matched"
    NO_MATCH = "no_match"
    NOT_CONFIGURED = "not_configured"
    INVALID_INPUT = "invalid_input"
    TIMEOUT = "timeout"


class Resolution(BaseModel):
    """Result of resolving one (primary, localized) title pair."""

    link: str | None = Field(default=None, description="Canonical catalog link, if any")
    outcome: ResolutionOutcome = Field(..., description="How the resolution ended")
    score: int | None = Field(default=None, description="Score of the chosen candidate")
    query: str | None = Field(default=None, description="Query that produced the match")
    queries: list[str] = Field(default_factory=list, description="Query variants planned")
