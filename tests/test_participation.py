"""Tests for the business event participation lookup."""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from arobid_participation.core import participation
from arobid_participation.core.errors import ArobidError, InvalidInputError, ParticipationLookupError
from arobid_participation.core.models import EventsSource
from arobid_participation.core.participation import build_business_match, find_business_event_participation
from fakes import FakeArobidClient, business_page, event_page


def businesses_by_event(mapping, failing=()):
    """on_post handler answering from ``mapping`` keyed by event ID."""
    def on_post(body):
        event_id = body["eventId"]
        if event_id in failing:
            raise ArobidError("Gateway timeout (504 Gateway Timeout)", code="UPSTREAM_TIMEOUT", status_code=504)
        return mapping.get(event_id, business_page())
    return on_post


@pytest.mark.asyncio
async def test_explicit_event_ids_end_to_end():
    client = FakeArobidClient(
        on_post=businesses_by_event({"100": business_page("ACME CO."), "200": {"data": {"results": []}}})
    )

    report = await find_business_event_participation(
        client, {"businessName": "Acme Co", "eventIds": ["100", "200"]}
    )

    assert report.found is True
    assert report.events_scanned == 2
    assert report.events_with_matches == 1
    assert report.events_source is EventsSource.PROVIDED
    assert report.unmatched_event_ids == ["200"]
    assert report.inconclusive_event_ids == []
    assert report.errors is None
    assert len(report.matched_events) == 1
    matched = report.matched_events[0]
    assert matched.event_id == "100"
    assert [business.name for business in matched.matched_businesses] == ["ACME CO."]
    assert matched.total_businesses_in_event == 1
    assert report.normalized_business_name == "acme co"
    assert report.summary == 'Found 1 event(s) containing a business matching "Acme Co".'
    assert client.get_calls == []
    assert all(call.body["search"] == "Acme Co" for call in client.post_calls)


@pytest.mark.asyncio
async def test_empty_discovery_returns_early(monkeypatch):
    orchestrator = AsyncMock()
    monkeypatch.setattr(participation, "search_businesses_in_multiple_events", orchestrator)
    client = FakeArobidClient()

    report = await find_business_event_participation(
        client, {"businessName": "Acme Co", "eventSearch": "zzz-no-such-thing"}
    )

    assert report.found is False
    assert report.events_scanned == 0
    assert report.events_source is EventsSource.DISCOVERED
    assert report.summary == 'No events found for search "zzz-no-such-thing". Unable to check participation for Acme Co.'
    orchestrator.assert_not_awaited()
    assert client.post_calls == []
    assert client.get_calls[0].body["search"] == "zzz-no-such-thing"


@pytest.mark.asyncio
async def test_discovered_events_carry_metadata():
    def on_get(params):
        if params["pageIndex"] == "1":
            return {
                "data": [
                    {"id": 1, "name": "Food Expo", "startTime": "2024-05-01", "endTime": "2024-05-03", "location": "Hanoi"},
                    {"id": 2, "name": "Tech Expo"},
                ]
            }
        return {"data": []}

    client = FakeArobidClient(
        on_get=on_get,
        on_post=businesses_by_event({"1": business_page("Acme Co", row_count=350)}),
    )

    report = await find_business_event_participation(
        client, {"businessName": "Acme Co", "eventSearch": "expo", "maxEvents": 10}
    )

    assert report.events_source is EventsSource.DISCOVERED
    assert report.events_scanned == 2
    assert report.unmatched_event_ids == ["2"]
    matched = report.matched_events[0]
    assert matched.event_name == "Food Expo"
    assert matched.start_time == "2024-05-01"
    assert matched.end_time == "2024-05-03"
    assert matched.location == "Hanoi"
    assert matched.total_businesses_in_event == 350
    assert report.search_context.event_search == "expo"
    assert report.search_context.max_events == 10
    assert report.search_context.pages_loaded == 1


@pytest.mark.asyncio
async def test_discovery_runs_without_event_search():
    client = FakeArobidClient(on_get=lambda params: event_page("9") if params["pageIndex"] == "1" else {"data": []})

    report = await find_business_event_participation(client, {"businessName": "Acme Co"})

    assert report.events_source is EventsSource.DISCOVERED
    assert report.found is False
    assert report.summary == 'Business "Acme Co" was not found in 1 scanned event(s).'
    assert "search" not in client.get_calls[0].body


@pytest.mark.asyncio
async def test_failed_event_is_unmatched_and_inconclusive():
    client = FakeArobidClient(
        on_post=businesses_by_event({"a": business_page("Acme Co")}, failing={"b"})
    )

    report = await find_business_event_participation(
        client, {"businessName": "Acme Co", "eventIds": ["a", "b", "c"]}
    )

    assert report.found is True
    assert report.unmatched_event_ids == ["b", "c"]
    assert report.inconclusive_event_ids == ["b"]
    assert [error.event_id for error in report.errors] == ["b"]
    assert report.errors[0].code == "UPSTREAM_TIMEOUT"
    assert report.summary.endswith("1 event(s) could not be searched and are reported as inconclusive.")


@pytest.mark.asyncio
async def test_explicit_ids_take_precedence_over_event_search():
    client = FakeArobidClient()

    report = await find_business_event_participation(
        client, {"businessName": "Acme Co", "eventIds": ["5", "5", "6"], "eventSearch": "expo"}
    )

    assert report.events_source is EventsSource.PROVIDED
    assert report.events_scanned == 2
    assert client.get_calls == []
    assert [call.body["eventId"] for call in client.post_calls] == ["5", "6"]


@pytest.mark.asyncio
async def test_business_options_reach_each_search():
    client = FakeArobidClient()

    await find_business_event_participation(
        client,
        {
            "business_name": "Acme Co",
            "event_ids": ["1"],
            "business_page_size": 50,
            "business_page_index": 2,
            "business_sort_field": "name",
            "business_asc": True,
            "expo_business_category_id": [3, 4],
            "currency_id": 2,
            "language": "vi",
        },
    )

    call = client.post_calls[0]
    assert call.body["pageSize"] == 50
    assert call.body["pageIndex"] == 2
    assert call.body["SortField"] == "name"
    assert call.body["Asc"] is True
    assert call.body["expoBusinessCategoryId"] == [3, 4]
    assert call.headers["currencyid"] == "2"
    assert call.headers["language"] == "vi"


@pytest.mark.asyncio
async def test_discovery_failure_is_fatal():
    def on_get(params):
        raise ArobidError("Service down (503 Service Unavailable)", code="UNAVAILABLE", status_code=503)

    client = FakeArobidClient(on_get=on_get)

    with pytest.raises(ParticipationLookupError) as excinfo:
        await find_business_event_participation(client, {"businessName": "Acme Co", "eventSearch": "expo"})

    assert str(excinfo.value) == (
        "Failed to find business participation: Service down (503 Service Unavailable) (UNAVAILABLE)"
    )
    assert excinfo.value.status_code == 503
    assert excinfo.value.code == "UNAVAILABLE"
    assert client.post_calls == []


@pytest.mark.asyncio
async def test_transport_failure_during_discovery_is_fatal():
    def on_get(params):
        raise httpx.ConnectError("connection refused")

    client = FakeArobidClient(on_get=on_get)

    with pytest.raises(ParticipationLookupError, match="connection refused"):
        await find_business_event_participation(client, {"businessName": "Acme Co"})


@pytest.mark.asyncio
async def test_unexpected_discovery_error_is_fatal():
    def on_get(params):
        raise RuntimeError("decoder blew up")

    client = FakeArobidClient(on_get=on_get)

    with pytest.raises(ParticipationLookupError) as excinfo:
        await find_business_event_participation(client, {"businessName": "Acme"})

    assert str(excinfo.value) == "Failed to find business participation: decoder blew up"
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_unexpected_orchestration_error_is_fatal(monkeypatch):
    monkeypatch.setattr(
        participation, "search_businesses_in_multiple_events", AsyncMock(side_effect=KeyError("resultsByEvent"))
    )
    client = FakeArobidClient()

    with pytest.raises(ParticipationLookupError, match="resultsByEvent"):
        await find_business_event_participation(client, {"businessName": "Acme", "eventIds": ["1"]})


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [
        {},
        {"businessName": ""},
        {"businessName": "   "},
        {"businessName": 42},
        {"businessName": "Acme", "maxEvents": 0},
        {"businessName": "Acme", "eventPageSize": "10"},
        {"businessName": "Acme", "eventIds": "100"},
        None,
    ],
)
async def test_invalid_input_makes_no_requests(params):
    client = FakeArobidClient()

    with pytest.raises(InvalidInputError):
        await find_business_event_participation(client, params)

    assert client.get_calls == []
    assert client.post_calls == []


@pytest.mark.asyncio
async def test_report_serializes_with_camel_case_keys():
    client = FakeArobidClient(on_post=lambda body: business_page("Acme Co"))

    report = await find_business_event_participation(client, {"businessName": "Acme Co", "eventIds": ["1"]})
    payload = report.model_dump(mode="json", by_alias=True, exclude_none=True)

    assert payload["eventsSource"] == "provided"
    assert payload["eventsWithMatches"] == 1
    assert payload["matchedEvents"][0]["totalBusinessesInEvent"] == 1
    assert payload["matchedEvents"][0]["matchedBusinesses"][0]["businessId"] == "1"
    assert payload["searchContext"]["businessSearch"]["pageSize"] == 1000
    assert "errors" not in payload


@pytest.mark.parametrize(
    ("row", "business_id", "name"),
    [
        ({"id": 12, "name": "Acme"}, "12", "Acme"),
        ({"companyId": "c-1", "companyName": " Acme Ltd "}, "c-1", "Acme Ltd"),
        ({"profileId": 3, "name": "", "brandName": "ACME"}, "3", "ACME"),
        ({"other": True}, None, None),
    ],
)
def test_build_business_match(row, business_id, name):
    match = build_business_match(row)
    assert match.business_id == business_id
    assert match.name == name
    assert match.raw == row
