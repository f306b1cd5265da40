"""Business event participation lookup.

Combines event selection (explicit IDs or discovery through the event
listing) with a batched exhibitor search across the selected events, then
folds the per-event outcomes into one ``ParticipationReport``.

Three outcomes are kept apart:
- a report with ``found=False`` after scanning N events,
- a report with ``events_scanned=0`` when discovery found no events,
- a raised ``ParticipationLookupError`` when the lookup itself failed.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from .business_search import extract_businesses
from .clients.arobid import ArobidClient
from .errors import ArobidError, ParticipationLookupError
from .event_discovery import collect_event_candidates
from .models import (
    BusinessMatch,
    BusinessSearchContext,
    EventCandidate,
    EventsSource,
    MatchedEvent,
    MultiEventSearchResult,
    ParticipationReport,
    SearchContext,
)
from .multi_event_search import search_businesses_in_multiple_events
from .normalize import normalize_text
from .records import first_identifier, first_string
from .validation import DiscoveryOptions, ParticipationInput, validate_params

logger = logging.getLogger(__name__)

BUSINESS_ID_KEYS = ("id", "businessId", "companyId", "profileId")
BUSINESS_NAME_KEYS = (
    "name",
    "businessName",
    "companyName",
    "title",
    "fullName",
    "organizationName",
    "brandName",
    "tradingName",
)


def build_business_match(raw_business: Any) -> BusinessMatch:
    return BusinessMatch(
        business_id=first_identifier(raw_business, BUSINESS_ID_KEYS),
        name=first_string(raw_business, BUSINESS_NAME_KEYS),
        raw=raw_business,
    )


def _search_context(query: ParticipationInput, pages_loaded: int) -> SearchContext:
    return SearchContext(
        event_search=query.event_search,
        max_events=query.max_events,
        pages_loaded=pages_loaded,
        business_search=BusinessSearchContext(
            page_size=query.business_page_size,
            page_index=query.business_page_index,
            sort_field=query.business_sort_field,
            asc=query.business_asc,
        ),
    )


def _summary(business_name: str, matched: int, scanned: int, inconclusive: int) -> str:
    if matched:
        summary = f'Found {matched} event(s) containing a business matching "{business_name}".'
    else:
        summary = f'Business "{business_name}" was not found in {scanned} scanned event(s).'
    if inconclusive:
        summary += f" {inconclusive} event(s) could not be searched and are reported as inconclusive."
    return summary


def build_participation_report(
    query: ParticipationInput,
    event_ids: list[str],
    metadata_map: dict[str, EventCandidate],
    search_result: MultiEventSearchResult,
    events_source: EventsSource,
    pages_loaded: int = 0,
) -> ParticipationReport:
    """Partition candidate events into matched and unmatched and build the report.

    An event whose search failed is unmatched, and is also listed in
    ``inconclusive_event_ids``.
    """
    failed = set(search_result.failed_events)
    matched_events: list[MatchedEvent] = []
    unmatched_event_ids: list[str] = []
    inconclusive_event_ids: list[str] = []

    for event_id in event_ids:
        response = search_result.results_by_event.get(event_id)
        businesses = extract_businesses(response) if response is not None else []
        if not businesses:
            unmatched_event_ids.append(event_id)
            if event_id in failed:
                inconclusive_event_ids.append(event_id)
            continue

        metadata = metadata_map.get(event_id) or EventCandidate(event_id=event_id)
        total = response.get("total")
        matched_events.append(
            MatchedEvent(
                event_id=event_id,
                event_name=metadata.name,
                start_time=metadata.start_time,
                end_time=metadata.end_time,
                location=metadata.location,
                matched_businesses=[build_business_match(business) for business in businesses],
                total_businesses_in_event=total if isinstance(total, int) else len(businesses),
            )
        )

    return ParticipationReport(
        business_name=query.business_name,
        normalized_business_name=normalize_text(query.business_name),
        found=bool(matched_events),
        matched_events=matched_events,
        events_scanned=len(event_ids),
        events_with_matches=len(matched_events),
        events_source=events_source,
        unmatched_event_ids=unmatched_event_ids,
        inconclusive_event_ids=inconclusive_event_ids,
        errors=search_result.errors,
        summary=_summary(query.business_name, len(matched_events), len(event_ids), len(inconclusive_event_ids)),
        search_context=_search_context(query, pages_loaded),
    )


def _no_events_report(query: ParticipationInput, pages_loaded: int) -> ParticipationReport:
    scope = f' for search "{query.event_search}"' if query.event_search else ""
    return ParticipationReport(
        business_name=query.business_name,
        normalized_business_name=normalize_text(query.business_name),
        found=False,
        events_scanned=0,
        events_with_matches=0,
        events_source=EventsSource.DISCOVERED,
        summary=f"No events found{scope}. Unable to check participation for {query.business_name}.",
        search_context=_search_context(query, pages_loaded),
    )


async def _find_participation(client: ArobidClient, query: ParticipationInput) -> ParticipationReport:
    pages_loaded = 0
    if query.event_ids:
        events_source = EventsSource.PROVIDED
        event_ids = list(dict.fromkeys(query.event_ids))
        metadata_map = {event_id: EventCandidate(event_id=event_id) for event_id in event_ids}
    else:
        events_source = EventsSource.DISCOVERED
        collection = await collect_event_candidates(
            client,
            DiscoveryOptions(
                search=query.event_search,
                max_events=query.max_events,
                page_size=query.event_page_size,
                page_index=query.event_page_index,
                sort_field=query.event_sort_field,
                asc=query.event_asc,
                currency_id=query.currency_id,
                language=query.language,
            ),
        )
        event_ids = collection.event_ids
        metadata_map = collection.metadata_map
        pages_loaded = collection.pages_loaded
        if not event_ids:
            logger.info("No events discovered for search %r", query.event_search)
            return _no_events_report(query, pages_loaded)

    search_result = await search_businesses_in_multiple_events(
        client,
        {
            "event_ids": event_ids,
            "search": query.business_name,
            "page_size": query.business_page_size,
            "page_index": query.business_page_index,
            "sort_field": query.business_sort_field,
            "asc": query.business_asc,
            "origin_country_id": query.origin_country_id,
            "national_code": query.national_code,
            "expo_business_category_id": query.expo_business_category_id,
            "currency_id": query.currency_id,
            "language": query.language,
        },
    )
    return build_participation_report(
        query, event_ids, metadata_map, search_result, events_source, pages_loaded
    )


async def find_business_event_participation(
    client: ArobidClient,
    params: Union[ParticipationInput, Mapping[str, Any]],
) -> ParticipationReport:
    """Find the events a business participates in.

    Args:
        client: Backend client.
        params: ``businessName`` plus either ``eventIds`` (scanned as given) or
            discovery options (``eventSearch``, ``maxEvents``, ``eventPageSize``,
            ...), and business search options applied to every event.

    Returns:
        ParticipationReport for the scanned events.

    Raises:
        InvalidInputError: parameters failed validation (no request made).
        ParticipationLookupError: event discovery or the search run failed as
            a whole. Individual event failures are reported, not raised.
    """
    query = validate_params(ParticipationInput, params)
    logger.info("Looking up event participation for %r", query.business_name)

    try:
        report = await _find_participation(client, query)
    except ArobidError as exc:
        raise ParticipationLookupError(
            _lookup_failure_message(exc.message, exc.code),
            status_code=exc.status_code,
            code=exc.code,
        ) from exc
    except Exception as exc:
        raise ParticipationLookupError(_lookup_failure_message(str(exc) or type(exc).__name__)) from exc

    logger.info(
        "%r: %d of %d scanned event(s) matched",
        query.business_name, report.events_with_matches, report.events_scanned,
    )
    return report


def _lookup_failure_message(message: str, code: Optional[str] = None) -> str:
    text = f"Failed to find business participation: {message or 'Unknown error'}"
    if code:
        text += f" ({code})"
    return text
