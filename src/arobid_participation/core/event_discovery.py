"""Event candidate discovery over the paginated event listing.

Pages through ``/tradexpo/api/events`` until enough distinct events are
collected, a page comes back empty, or the page safety cap is hit.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from .clients.arobid import ArobidClient, build_tradexpo_headers
from .models import EventCandidate, EventCollection
from .records import ListPath, first_identifier, first_list, first_string
from .validation import DiscoveryOptions, EventPageQuery, validate_params

logger = logging.getLogger(__name__)

EVENTS_ENDPOINT = "/tradexpo/api/events"

# Guards against a backend that never returns an empty page.
MAX_PAGES = 100

EVENT_LIST_PATHS: tuple[ListPath, ...] = (
    ("data",),
    ("items",),
    ("events",),
    (),
    ("data", "results"),
    ("data", "items"),
)

EVENT_ID_KEYS = ("id", "eventId", "eventID", "Id", "event_id", "expoId", "expoID", "expo_id")
EVENT_NAME_KEYS = ("name", "eventName", "title")
EVENT_START_KEYS = ("startTime", "startDate")
EVENT_END_KEYS = ("endTime", "endDate")
EVENT_LOCATION_KEYS = ("location", "address", "venue")


def extract_events(response: Any) -> list:
    """Pull the raw event rows out of a listing response."""
    return first_list(response, EVENT_LIST_PATHS)


def build_event_candidate(raw_event: Any) -> Optional[EventCandidate]:
    """Candidate from a raw event row, or None when it carries no usable ID."""
    event_id = first_identifier(raw_event, EVENT_ID_KEYS)
    if event_id is None:
        return None
    return EventCandidate(
        event_id=event_id,
        name=first_string(raw_event, EVENT_NAME_KEYS),
        start_time=first_string(raw_event, EVENT_START_KEYS),
        end_time=first_string(raw_event, EVENT_END_KEYS),
        location=first_string(raw_event, EVENT_LOCATION_KEYS),
        raw=raw_event,
    )


def build_event_query_params(query: EventPageQuery) -> dict[str, str]:
    params: dict[str, str] = {}
    if query.search:
        params["search"] = query.search
    params["pageSize"] = str(query.page_size)
    params["pageIndex"] = str(query.page_index)
    if query.sort_field:
        params["SortField"] = query.sort_field
    if query.asc is not None:
        params["Asc"] = "true" if query.asc else "false"
    return params


async def fetch_events_page(
    client: ArobidClient,
    query: Union[EventPageQuery, Mapping[str, Any]],
) -> Any:
    """Fetch one page of the event listing and return the raw response."""
    query = validate_params(EventPageQuery, query)
    return await client.get(
        EVENTS_ENDPOINT,
        headers=build_tradexpo_headers(query.currency_id, query.language),
        params=build_event_query_params(query),
    )


async def collect_event_candidates(
    client: ArobidClient,
    options: Union[DiscoveryOptions, Mapping[str, Any]],
) -> EventCollection:
    """Collect up to ``max_events`` distinct event candidates, in discovery order.

    Rows without an extractable ID and IDs already seen are skipped; the first
    occurrence of an ID keeps its metadata. Reaching ``MAX_PAGES`` ends the
    crawl early without raising. Transport errors propagate.
    """
    options = validate_params(DiscoveryOptions, options)

    collection = EventCollection()
    seen: set[str] = set()
    page_index = options.page_index

    logger.info(
        "Discovering events: search=%r page_size=%d start_page=%d max_events=%d",
        options.search, options.page_size, page_index, options.max_events,
    )

    while len(collection.event_ids) < options.max_events and collection.pages_loaded < MAX_PAGES:
        response = await fetch_events_page(client, options.model_copy(update={"page_index": page_index}))
        raw_events = extract_events(response)
        if not raw_events:
            logger.debug("Page %d returned no events, stopping", page_index)
            break

        collection.total_raw_events += len(raw_events)
        for raw_event in raw_events:
            if len(collection.event_ids) >= options.max_events:
                break
            candidate = build_event_candidate(raw_event)
            if candidate is None or candidate.event_id in seen:
                continue
            seen.add(candidate.event_id)
            collection.metadata_map[candidate.event_id] = candidate
            collection.event_ids.append(candidate.event_id)

        collection.pages_loaded += 1
        logger.debug(
            "Page %d: %d raw event(s), %d candidate(s) so far",
            page_index, len(raw_events), len(collection.event_ids),
        )
        page_index += 1

    if collection.pages_loaded >= MAX_PAGES and len(collection.event_ids) < options.max_events:
        logger.warning("Event discovery stopped at the %d page safety limit", MAX_PAGES)

    logger.info(
        "Discovered %d event(s) from %d raw row(s) over %d page(s)",
        len(collection.event_ids), collection.total_raw_events, collection.pages_loaded,
    )
    return collection
