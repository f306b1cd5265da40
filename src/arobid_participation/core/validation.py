"""Input models for the engine's entry points.

Each entry point accepts an untyped parameter bag (camelCase or snake_case
keys) and validates it here before any network activity. Types are strict:
``"5"`` is not a page size and ``True`` is not an integer.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic.types import StrictBool, StrictInt, StrictStr

from .errors import InvalidInputError

DEFAULT_BUSINESS_PAGE_SIZE = 1000
DEFAULT_EVENT_PAGE_SIZE = 200
DEFAULT_MAX_EVENTS = 200
MAX_EVENTS_LIMIT = 1000
DEFAULT_CURRENCY_ID = 1
DEFAULT_LANGUAGE = "en"

NonEmptyStr = Annotated[StrictStr, StringConstraints(strip_whitespace=True, min_length=1)]
TrimmedStr = Annotated[StrictStr, StringConstraints(strip_whitespace=True)]
PositiveInt = Annotated[StrictInt, Field(gt=0)]
NonNegativeInt = Annotated[StrictInt, Field(ge=0)]

# Filter arrays must be all integers or all strings.
FilterValues = Union[list[StrictInt], list[TrimmedStr]]

ModelT = TypeVar("ModelT", bound=BaseModel)


class InputModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class BusinessSearchFilters(InputModel):
    """Parameters applied to every event-scoped business search."""

    search: Optional[TrimmedStr] = None
    page_size: PositiveInt = DEFAULT_BUSINESS_PAGE_SIZE
    page_index: Optional[NonNegativeInt] = None
    sort_field: Optional[TrimmedStr] = None
    asc: Optional[StrictBool] = None
    origin_country_id: Optional[FilterValues] = None
    national_code: Optional[FilterValues] = None
    expo_business_category_id: Optional[FilterValues] = None
    currency_id: PositiveInt = DEFAULT_CURRENCY_ID
    language: TrimmedStr = DEFAULT_LANGUAGE


class BusinessSearchInput(BusinessSearchFilters):
    event_id: NonEmptyStr


class MultiEventSearchInput(BusinessSearchFilters):
    event_ids: list[NonEmptyStr] = Field(min_length=1)

    @field_validator("event_ids")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))


class EventPageQuery(InputModel):
    """One request against the paginated event listing."""

    search: Optional[TrimmedStr] = None
    page_size: PositiveInt = DEFAULT_EVENT_PAGE_SIZE
    page_index: Annotated[StrictInt, Field(ge=1)] = 1
    sort_field: Optional[TrimmedStr] = None
    asc: Optional[StrictBool] = None
    currency_id: Optional[PositiveInt] = None
    language: Optional[TrimmedStr] = None


class DiscoveryOptions(EventPageQuery):
    max_events: Annotated[StrictInt, Field(ge=1, le=MAX_EVENTS_LIMIT)] = DEFAULT_MAX_EVENTS


class ParticipationInput(InputModel):
    business_name: NonEmptyStr
    event_ids: Optional[list[NonEmptyStr]] = None
    event_search: Optional[TrimmedStr] = None
    max_events: Annotated[StrictInt, Field(ge=1, le=MAX_EVENTS_LIMIT)] = DEFAULT_MAX_EVENTS
    event_page_size: PositiveInt = DEFAULT_EVENT_PAGE_SIZE
    event_page_index: Annotated[StrictInt, Field(ge=1)] = 1
    event_sort_field: Optional[TrimmedStr] = None
    event_asc: Optional[StrictBool] = None
    business_page_size: PositiveInt = DEFAULT_BUSINESS_PAGE_SIZE
    business_page_index: Optional[NonNegativeInt] = None
    business_sort_field: Optional[TrimmedStr] = None
    business_asc: Optional[StrictBool] = None
    origin_country_id: Optional[FilterValues] = None
    national_code: Optional[FilterValues] = None
    expo_business_category_id: Optional[FilterValues] = None
    currency_id: Optional[PositiveInt] = None
    language: Optional[TrimmedStr] = None


def validate_params(model: type[ModelT], params: Any) -> ModelT:
    """Validate a parameter bag into ``model``.

    Keys whose value is ``None`` are treated as absent so defaults apply.

    Raises:
        InvalidInputError: if ``params`` is not a mapping or fails validation.
    """
    if isinstance(params, model):
        return params
    if isinstance(params, BaseModel):
        params = params.model_dump()
    if not isinstance(params, Mapping):
        raise InvalidInputError("Input must be an object")

    cleaned = {key: value for key, value in params.items() if value is not None}
    try:
        return model.model_validate(cleaned)
    except ValidationError as exc:
        raise InvalidInputError(_describe_validation_error(exc)) from exc


def _describe_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "input"
        problems.append(f"{field}: {error['msg']}")
    return "Invalid input: " + "; ".join(problems)
