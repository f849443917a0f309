"""
Typed payloads for the model-generated digests.

Models are lenient: the generator frequently omits fields, sends `null`, or
mixes numbers and strings. Every optional field has a default that also
replaces an explicit `null`, numbers are accepted for text fields, and numeric
fields are coerced from strings where possible. Unknown keys are ignored.
"""

from __future__ import annotations

from typing import Any, Literal
from urllib.parse import quote_plus

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

EventCategory = Literal["long-running", "one-off"]


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    @field_validator("*", mode="before")
    @classmethod
    def _null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is not None or info.field_name is None:
            return value
        field = cls.model_fields[info.field_name]
        if field.is_required():
            return value
        return field.get_default(call_default_factory=True)


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip().split("/")[0])
        except ValueError:
            return None
    return None


def score_colour(score: float | None) -> str:
    """Green for 8 and above, amber for 6 and above, red otherwise."""
    if score is None:
        return "#6b7280"
    if score >= 8:
        return "#10b981"
    if score >= 6:
        return "#f59e0b"
    return "#ef4444"


# --- events -----------------------------------------------------------------


class Event(_Payload):
    title: str = "Untitled event"
    sources: list[str] = Field(default_factory=list)
    description: str = ""
    distance_miles: float | None = Field(default=None, alias="distanceMiles")
    distance: str | None = None
    time: str | None = None
    start_date_time: str | None = Field(default=None, alias="startDateTime")
    venue_name: str | None = Field(default=None, alias="venueName")
    venue_address: str | None = Field(default=None, alias="venueAddress")
    category: str | None = None

    @field_validator("distance_miles", mode="before")
    @classmethod
    def _coerce_distance(cls, value: Any) -> float | None:
        return _to_float(value)

    @field_validator("sources", mode="before")
    @classmethod
    def _coerce_sources(cls, value: Any) -> list[str]:
        if isinstance(value, list):
            return [str(v) for v in value if v]
        if isinstance(value, str) and value.strip():
            return [value]
        return []

    def resolved_category(self, inferred: str | None = None) -> str:
        return self.category or inferred or "one-off"

    def distance_label(self, suffix: str = " mi from TN231DS") -> str | None:
        if self.distance:
            return self.distance
        if self.distance_miles is not None:
            return f"{self.distance_miles:.1f}{suffix}"
        return None

    @property
    def when(self) -> str | None:
        return self.time or self.start_date_time

    @property
    def search_url(self) -> str:
        query = f"{self.title} {self.venue_name or ''} Ashford Kent".strip()
        query = " ".join(query.split())
        return "https://www.google.com/search?q=" + quote_plus(query)


class EventsDigest(_Payload):
    title: str | None = None
    subtitle: str | None = None
    long_running_events: list[Event] = Field(default_factory=list, alias="longRunningEvents")
    one_off_events: list[Event] = Field(default_factory=list, alias="oneOffEvents")
    events: list[Event] = Field(default_factory=list)

    @field_validator("long_running_events", "one_off_events", "events", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def total(self) -> int:
        return len(self.long_running_events) + len(self.one_off_events) + len(self.events)

    def is_empty(self) -> bool:
        return self.total == 0


# --- games ------------------------------------------------------------------


class Game(_Payload):
    name: str = "Unknown game"
    score: float | None = None
    type: str = ""
    description: str = ""
    reason: str = ""
    store_url: str | None = Field(default=None, alias="storeUrl")

    @field_validator("score", mode="before")
    @classmethod
    def _coerce_score(cls, value: Any) -> float | None:
        return _to_float(value)

    @property
    def colour(self) -> str:
        return score_colour(self.score)

    @property
    def url(self) -> str:
        if self.store_url:
            return self.store_url
        return "https://www.meta.com/en-gb/experiences/search/?q=" + quote_plus(self.name)


class GamesDigest(_Payload):
    title: str = "🎮 Gaming Newsletter - Latest Games & Updates"
    subtitle: str = "🆕 Featured Games"
    games: list[Game] = Field(default_factory=list)


# --- tv ---------------------------------------------------------------------


def trailer_search_url(title: str) -> str:
    return "https://www.youtube.com/results?search_query=" + quote_plus(" ".join(title.split()))


class SportsEvent(_Payload):
    name: str = ""
    time: str | None = None
    channel: str = ""
    category: str = ""
    description: str = ""


class LiveShow(_Payload):
    title: str = ""
    time: str | None = None
    channel: str = ""
    genre: str = ""
    description: str = ""


class _Rated(_Payload):
    title: str = ""
    rating: float | None = None
    genre: str = ""
    plot: str = ""

    @field_validator("rating", mode="before")
    @classmethod
    def _coerce_rating(cls, value: Any) -> float | None:
        return _to_float(value)

    @property
    def colour(self) -> str:
        return score_colour(self.rating)

    @property
    def trailer_url(self) -> str:
        return trailer_search_url(self.title)


class StreamingTitle(_Rated):
    platform: str = ""
    reason: str = ""


class CinemaTitle(_Rated):
    release_status: str = Field(default="", alias="releaseStatus")


class TvDigest(_Payload):
    title: str = "📺 TV & Entertainment Guide"
    sports: list[SportsEvent] = Field(default_factory=list)
    live_tv: list[LiveShow] = Field(default_factory=list, alias="liveTV")
    tv_shows: list[StreamingTitle] = Field(default_factory=list, alias="tvShows")
    movies: list[StreamingTitle] = Field(default_factory=list)
    cinema: list[CinemaTitle] = Field(default_factory=list)

    @field_validator("sports", "live_tv", "tv_shows", "movies", "cinema", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    def counts(self) -> dict[str, int]:
        return {
            "sports": len(self.sports),
            "liveTV": len(self.live_tv),
            "tvShows": len(self.tv_shows),
            "movies": len(self.movies),
            "cinema": len(self.cinema),
        }


# --- shift ------------------------------------------------------------------

SHIFT_SIGNATURE = "Sent from the machine on behalf of Ahmed"


class ShiftMessage(_Payload):
    message: str

    @field_validator("message")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("message must not be empty")
        return value
