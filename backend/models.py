"""Shared backend models for Wordhoard."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

MIN_STARS = 0
MAX_STARS = 5


def _timestamp() -> float:
    return time.time()


def clamp_stars(stars: int) -> int:
    return max(MIN_STARS, min(MAX_STARS, int(stars)))


@dataclass
class WordRecord:
    """One stored word. Instances handed out by the store are copies."""

    text: str
    count: int = 1
    stars: int = 0
    created_at: float = field(default_factory=_timestamp)
    updated_at: float = field(default_factory=_timestamp)


@dataclass(frozen=True)
class HourlyBucket:
    hour_start: float
    count: int


@dataclass(frozen=True)
class StoreSummary:
    total: int
    starred: int
    first_word_at: Optional[float] = None


@dataclass(frozen=True)
class WordTrend:
    text: str
    count: int
    days_since_first_seen: int
    per_day: float
    label: str


# API payloads

class WordPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    count: int
    stars: int = 0
    created_at: float = Field(alias="created_at")
    updated_at: float = Field(alias="updated_at")

    @classmethod
    def from_record(cls, record: WordRecord) -> "WordPayload":
        return cls(
            text=record.text,
            count=record.count,
            stars=record.stars,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class WordsResponsePayload(BaseModel):
    words: List[WordPayload] = Field(default_factory=list)
    total: int = 0


class DefinitionPayload(BaseModel):
    text: str
    definition: str


class TrendPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    count: int
    days_since_first_seen: int = Field(alias="days_since_first_seen")
    per_day: float = Field(alias="per_day")
    label: str


class HourlyBucketPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hour_start: float = Field(alias="hour_start")
    count: int


class HourlyStatsResponsePayload(BaseModel):
    hours: int
    buckets: List[HourlyBucketPayload] = Field(default_factory=list)


class SummaryResponsePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    starred: int
    first_word_at: Optional[float] = Field(default=None, alias="first_word_at")
    top_words: List[WordPayload] = Field(default_factory=list, alias="top_words")


class IngestResponsePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    accepted: bool = True
    candidates: List[str] = Field(default_factory=list)
    confirmed: List[str] = Field(default_factory=list)


class LimitsPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    max_text_length: int = Field(alias="max_text_length")
    min_word_length: int = Field(alias="min_word_length")
    max_word_length: int = Field(alias="max_word_length")


# Request payloads

class SetStarsRequest(BaseModel):
    text: str
    stars: int = Field(ge=MIN_STARS, le=MAX_STARS)


class DeleteWordRequest(BaseModel):
    text: str


class IngestRequest(BaseModel):
    text: str
    wait: bool = False
