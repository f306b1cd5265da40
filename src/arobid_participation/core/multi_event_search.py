"""Business search across many events in fixed-size concurrent waves.

Event IDs are split into consecutive batches of ``BATCH_SIZE``. Each batch runs
its searches concurrently and fully settles before the next batch starts, so
at most ``BATCH_SIZE`` requests are in flight. A failed event is recorded as an
``EventSearchError`` and never stops its siblings or later batches.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterator, Mapping, Union

from .business_search import search_businesses_in_event
from .clients.arobid import ArobidClient
from .models import EventSearchError, MultiEventSearchResult
from .validation import MultiEventSearchInput, validate_params

logger = logging.getLogger(__name__)

BATCH_SIZE = 20


def _batches(items: list[str], size: int) -> Iterator[list[str]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


async def _search_event(client: ArobidClient, event_id: str, shared: dict[str, Any]) -> dict[str, Any]:
    return await search_businesses_in_event(client, {**shared, "event_id": event_id})


def _to_event_search_error(event_id: str, exc: BaseException) -> EventSearchError:
    status_code = getattr(exc, "status_code", None)
    code = getattr(exc, "code", None)
    return EventSearchError(
        event_id=event_id,
        error=str(exc) or type(exc).__name__,
        status_code=status_code if isinstance(status_code, int) else None,
        code=code if isinstance(code, str) else None,
    )


async def search_businesses_in_multiple_events(
    client: ArobidClient,
    params: Union[MultiEventSearchInput, Mapping[str, Any]],
) -> MultiEventSearchResult:
    """Run the same business search in every event of ``eventIds``.

    Duplicate event IDs are searched once. Parameters are validated up front;
    ``InvalidInputError`` is raised before any request is made.
    """
    query = validate_params(MultiEventSearchInput, params)
    shared = query.model_dump(exclude={"event_ids"})

    result = MultiEventSearchResult(total_events=len(query.event_ids))
    errors: list[EventSearchError] = []

    for wave, batch in enumerate(_batches(query.event_ids, BATCH_SIZE), start=1):
        logger.debug("Wave %d: searching %d event(s)", wave, len(batch))
        outcomes = await asyncio.gather(
            *(_search_event(client, event_id, shared) for event_id in batch),
            return_exceptions=True,
        )

        for event_id, outcome in zip(batch, outcomes):
            if isinstance(outcome, Exception):
                error = _to_event_search_error(event_id, outcome)
                logger.warning("Business search failed for event %s: %s", event_id, error.error)
                result.failed_events.append(event_id)
                errors.append(error)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                result.results_by_event[event_id] = outcome
                result.events_processed += 1

    result.errors = errors or None

    logger.info(
        "Searched %d event(s): %d succeeded, %d failed",
        result.total_events, result.events_processed, len(result.failed_events),
    )
    return result
