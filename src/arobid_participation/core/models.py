"""Pydantic data models: the shared business objects.

Attributes are snake_case in Python. The serialized form used by the MCP tools
(``model_dump(by_alias=True)``) is camelCase, matching the Arobid API naming.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EventsSource(str, Enum):
    """Where the scanned event IDs came from."""

    PROVIDED = "provided"
    DISCOVERED = "discovered"


class EventCandidate(CamelModel):
    """An event under consideration, with whatever metadata discovery found."""

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(min_length=1)
    name: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    raw: Any = None


class BusinessMatch(CamelModel):
    """One business row returned by an event-scoped search."""

    model_config = ConfigDict(frozen=True)

    business_id: Optional[str] = None
    name: Optional[str] = None
    raw: Any = None


class EventCollection(CamelModel):
    """Deduplicated event candidates gathered by paging the event listing."""

    event_ids: list[str] = Field(default_factory=list, description="Discovery order, no duplicates")
    metadata_map: dict[str, EventCandidate] = Field(default_factory=dict)
    pages_loaded: int = 0
    total_raw_events: int = 0


class EventSearchError(CamelModel):
    """Failure record for one event's business search."""

    event_id: str
    error: str
    status_code: Optional[int] = None
    code: Optional[str] = None


class MultiEventSearchResult(CamelModel):
    """Business search results across many events, split into successes and failures."""

    results_by_event: dict[str, dict[str, Any]] = Field(
        default_factory=dict, description="Adapter output keyed by event ID, successful events only"
    )
    events_processed: int = 0
    total_events: int = 0
    failed_events: list[str] = Field(default_factory=list)
    errors: Optional[list[EventSearchError]] = None

    @property
    def found(self) -> bool:
        return any(result.get("found") for result in self.results_by_event.values())

    @property
    def total_businesses(self) -> int:
        return sum(int(result.get("total") or 0) for result in self.results_by_event.values())


class MatchedEvent(CamelModel):
    """An event in which the business was found."""

    event_id: str
    event_name: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    matched_businesses: list[BusinessMatch]
    total_businesses_in_event: int = Field(description="Row count reported by that event's search")


class BusinessSearchContext(CamelModel):
    page_size: int
    page_index: Optional[int] = None
    sort_field: Optional[str] = None
    asc: Optional[bool] = None


class SearchContext(CamelModel):
    """Parameters the lookup actually ran with."""

    event_search: Optional[str] = None
    max_events: int
    pages_loaded: int = 0
    business_search: BusinessSearchContext


class ParticipationReport(CamelModel):
    """Which scanned events a business participates in."""

    business_name: str
    normalized_business_name: str
    found: bool
    matched_events: list[MatchedEvent] = Field(default_factory=list)
    events_scanned: int
    events_with_matches: int
    events_source: EventsSource
    unmatched_event_ids: list[str] = Field(
        default_factory=list, description="Scanned events without a match, including events whose search failed"
    )
    inconclusive_event_ids: list[str] = Field(
        default_factory=list, description="Subset of unmatched events whose search failed"
    )
    errors: Optional[list[EventSearchError]] = None
    summary: str
    search_context: SearchContext
