"""Event-scoped business (exhibitor) search.

One POST per event. The response envelope is not guaranteed, so the business
list is located with an ordered set of shape recognizers; an unrecognized
shape yields an empty list instead of an error.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Union

import httpx

from .clients.arobid import ArobidClient, build_tradexpo_headers
from .errors import ArobidError, BusinessSearchError
from .records import ListPath, dig, first_list
from .validation import BusinessSearchInput, validate_params

logger = logging.getLogger(__name__)

BUSINESS_SEARCH_ENDPOINT = "/tradexpo/api/event/get-business-by-event-id-mul-for-view-all"

# Observed shape is data.results; the rest are fallbacks in priority order.
BUSINESS_LIST_PATHS: tuple[ListPath, ...] = (
    ("data", "results"),
    ("data", "items"),
    ("results",),
    ("items",),
    ("data",),
    (),
)


def extract_businesses(response: Any) -> list:
    """Pull the business rows out of a search response."""
    return first_list(response, BUSINESS_LIST_PATHS)


def _reported_total(response: Any, fallback: int) -> int:
    row_count = dig(response, ("data", "rowCount"))
    if isinstance(row_count, int) and not isinstance(row_count, bool):
        return row_count
    return fallback


def build_business_search_payload(query: BusinessSearchInput) -> dict[str, Any]:
    """Request body for the business search endpoint.

    Filter arrays are always sent, empty when unset. Sort options are sent in
    both camelCase and PascalCase since the backend reads either.
    """
    payload: dict[str, Any] = {
        "eventId": query.event_id,
        "originCountryId": query.origin_country_id or [],
        "nationalCode": query.national_code or [],
        "expoBusinessCategoryId": query.expo_business_category_id or [],
    }
    if query.search:
        payload["search"] = query.search
    payload["pageSize"] = query.page_size
    if query.page_index is not None:
        payload["pageIndex"] = query.page_index
    if query.sort_field:
        payload["sortField"] = query.sort_field
        payload["SortField"] = query.sort_field
    if query.asc is not None:
        payload["asc"] = query.asc
        payload["Asc"] = query.asc
    return payload


def summarize_business_response(response: Any) -> dict[str, Any]:
    """Copy of the raw response with ``found`` and ``total`` added."""
    businesses = extract_businesses(response)
    if isinstance(response, dict):
        summary = dict(response)
    elif isinstance(response, list):
        summary = {"data": response}
    else:
        summary = {}
    summary["found"] = len(businesses) > 0
    summary["total"] = _reported_total(response, len(businesses))
    return summary


async def search_businesses_in_event(
    client: ArobidClient,
    params: Union[BusinessSearchInput, Mapping[str, Any]],
) -> dict[str, Any]:
    """Search the exhibitors of one event.

    Args:
        client: Backend client.
        params: ``eventId`` plus optional search, paging, sort, filter and
            localization options (see ``BusinessSearchInput``).

    Returns:
        The raw response with ``found`` and ``total`` injected.

    Raises:
        InvalidInputError: parameters failed validation (no request made).
        BusinessSearchError: the backend or the network failed.
    """
    query = validate_params(BusinessSearchInput, params)

    try:
        response = await client.post(
            BUSINESS_SEARCH_ENDPOINT,
            json=build_business_search_payload(query),
            headers=build_tradexpo_headers(query.currency_id, query.language),
        )
    except ArobidError as exc:
        raise BusinessSearchError.from_backend(query.event_id, exc) from exc
    except httpx.HTTPError as exc:
        raise BusinessSearchError(
            f'Failed to search businesses in event "{query.event_id}": {str(exc) or type(exc).__name__}',
            event_id=query.event_id,
        ) from exc

    result = summarize_business_response(response)
    logger.debug("Event %s: %d business(es) found", query.event_id, result["total"])
    return result
