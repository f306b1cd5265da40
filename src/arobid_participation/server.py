"""Arobid Event Participation MCP Server.

FastMCP server with 4 tools over the Arobid tradexpo backend.
Run: arobid-participation-mcp

Backend settings come from the environment: AROBID_BACKEND_URL (required),
AROBID_API_KEY, AROBID_TENANT_ID, AROBID_TIMEOUT_SECONDS.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import BaseModel

from .core import business_search, event_discovery, multi_event_search, participation
from .core.clients.arobid import create_arobid_client

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True)


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Configure logging. Log records go to stderr so stdio transport stays clean."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    logger.info("Arobid participation server starting")
    yield


mcp = FastMCP(
    "Arobid Event Participation",
    instructions="Find which Arobid exhibitions a business participates in, and search exhibitors across events.",
    lifespan=lifespan,
)


def _to_payload(model: BaseModel) -> dict:
    """Serialize a result model to the camelCase JSON shape returned by the tools."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


# ─── Tool 1: Event Participation ─────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def find_business_event_participation(
    business_name: str,
    event_ids: Optional[list[str]] = None,
    event_search: Optional[str] = None,
    max_events: Optional[int] = None,
    event_page_size: Optional[int] = None,
    event_page_index: Optional[int] = None,
    event_sort_field: Optional[str] = None,
    event_asc: Optional[bool] = None,
    business_page_size: Optional[int] = None,
    business_page_index: Optional[int] = None,
    business_sort_field: Optional[str] = None,
    business_asc: Optional[bool] = None,
    origin_country_id: Optional[list[int]] = None,
    national_code: Optional[list[str]] = None,
    expo_business_category_id: Optional[list[int]] = None,
    currency_id: Optional[int] = None,
    language: Optional[str] = None,
) -> dict:
    """Determine which Arobid events a business participated in.

    Scans events (an explicit list, or events discovered by search term) and
    checks each event's exhibitor list for the business.

    Args:
        business_name: Name of the business to look up.
        event_ids: Event IDs to scan. Skips event discovery when provided.
        event_search: Search term for discovering events to scan.
        max_events: Maximum events to scan during discovery (1-1000, default 200).
        event_page_size: Page size for event discovery calls (default 200).
        event_page_index: Starting page for event discovery (default 1).
        event_sort_field: Event sort field during discovery.
        event_asc: Sort discovered events ascending.
        business_page_size: Page size for each exhibitor search (default 1000).
        business_page_index: Page index for each exhibitor search.
        business_sort_field: Sort field for each exhibitor search.
        business_asc: Sort exhibitors ascending.
        origin_country_id: Only businesses from these origin country IDs.
        national_code: Only businesses with these national codes.
        expo_business_category_id: Only businesses in these category IDs.
        currency_id: Currency ID header for all calls (default 1).
        language: Language code for all calls (default 'en').
    """
    params = {
        "business_name": business_name,
        "event_ids": event_ids,
        "event_search": event_search,
        "max_events": max_events,
        "event_page_size": event_page_size,
        "event_page_index": event_page_index,
        "event_sort_field": event_sort_field,
        "event_asc": event_asc,
        "business_page_size": business_page_size,
        "business_page_index": business_page_index,
        "business_sort_field": business_sort_field,
        "business_asc": business_asc,
        "origin_country_id": origin_country_id,
        "national_code": national_code,
        "expo_business_category_id": expo_business_category_id,
        "currency_id": currency_id,
        "language": language,
    }
    async with create_arobid_client() as client:
        report = await participation.find_business_event_participation(client, params)
    return _to_payload(report)


# ─── Tool 2: Exhibitors Across Events ────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def search_businesses_in_multiple_events(
    event_ids: list[str],
    search: Optional[str] = None,
    page_size: Optional[int] = None,
    page_index: Optional[int] = None,
    sort_field: Optional[str] = None,
    asc: Optional[bool] = None,
    origin_country_id: Optional[list[int]] = None,
    national_code: Optional[list[str]] = None,
    expo_business_category_id: Optional[list[int]] = None,
    currency_id: Optional[int] = None,
    language: Optional[str] = None,
) -> dict:
    """Search businesses across several events, 20 events at a time.

    Events that fail are listed in failedEvents/errors; the rest still return.

    Args:
        event_ids: Event IDs to search (at least one).
        search: Search term to filter businesses.
        page_size: Results per event (default 1000).
        page_index: Page index.
        sort_field: Field to sort by.
        asc: Sort ascending.
        origin_country_id: Origin country IDs to filter by.
        national_code: National codes to filter by.
        expo_business_category_id: Business category IDs to filter by.
        currency_id: Currency ID (default 1).
        language: Language code (default 'en').
    """
    params = {
        "event_ids": event_ids,
        "search": search,
        "page_size": page_size,
        "page_index": page_index,
        "sort_field": sort_field,
        "asc": asc,
        "origin_country_id": origin_country_id,
        "national_code": national_code,
        "expo_business_category_id": expo_business_category_id,
        "currency_id": currency_id,
        "language": language,
    }
    async with create_arobid_client() as client:
        result = await multi_event_search.search_businesses_in_multiple_events(client, params)

    payload = _to_payload(result)
    payload["found"] = result.found
    payload["totalBusinesses"] = result.total_businesses
    return payload


# ─── Tool 3: Exhibitors In One Event ─────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def search_businesses_in_event(
    event_id: str,
    search: Optional[str] = None,
    page_size: Optional[int] = None,
    page_index: Optional[int] = None,
    sort_field: Optional[str] = None,
    asc: Optional[bool] = None,
    origin_country_id: Optional[list[int]] = None,
    national_code: Optional[list[str]] = None,
    expo_business_category_id: Optional[list[int]] = None,
    currency_id: Optional[int] = None,
    language: Optional[str] = None,
) -> dict:
    """Search the businesses (exhibitors) of one event.

    Args:
        event_id: Event ID.
        search: Search term to filter businesses.
        page_size: Results per page (default 1000).
        page_index: Page index.
        sort_field: Field to sort by.
        asc: Sort ascending.
        origin_country_id: Origin country IDs to filter by.
        national_code: National codes to filter by.
        expo_business_category_id: Business category IDs to filter by.
        currency_id: Currency ID (default 1).
        language: Language code (default 'en').
    """
    params = {
        "event_id": event_id,
        "search": search,
        "page_size": page_size,
        "page_index": page_index,
        "sort_field": sort_field,
        "asc": asc,
        "origin_country_id": origin_country_id,
        "national_code": national_code,
        "expo_business_category_id": expo_business_category_id,
        "currency_id": currency_id,
        "language": language,
    }
    async with create_arobid_client() as client:
        return await business_search.search_businesses_in_event(client, params)


# ─── Tool 4: Event Listing ───────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def search_events(
    search: Optional[str] = None,
    page_size: Optional[int] = None,
    page_index: Optional[int] = None,
    sort_field: Optional[str] = None,
    asc: Optional[bool] = None,
    currency_id: Optional[int] = None,
    language: Optional[str] = None,
) -> dict:
    """Search active Arobid exhibitions/events, one page at a time.

    Args:
        search: Search term.
        page_size: Events per page (default 200).
        page_index: Page to fetch, starting at 1 (default 1).
        sort_field: Field to sort by.
        asc: Sort ascending.
        currency_id: Currency ID (default 1).
        language: Language code (default 'en').
    """
    params = {
        "search": search,
        "page_size": page_size,
        "page_index": page_index,
        "sort_field": sort_field,
        "asc": asc,
        "currency_id": currency_id,
        "language": language,
    }
    async with create_arobid_client() as client:
        response = await event_discovery.fetch_events_page(client, params)

    events = event_discovery.extract_events(response)
    return {
        "events": events,
        "count": len(events),
        "summary": f"Found {len(events)} event(s) on this page"
        + (f" matching '{search}'" if search else ""),
    }


def main():
    """Entry point for the CLI command."""
    mcp.run()


if __name__ == "__main__":
    main()
