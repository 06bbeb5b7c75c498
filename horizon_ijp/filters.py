"""
In-memory filter, sort and pagination engine.

Every list view in the marketplace follows the same recipe: narrow a
collection with a set of named criteria, order it by one key and cut
out the requested page.  The pieces here are deliberately forgiving.
Unknown filter names, criteria of the wrong type, unparsable dates or
an unknown sort option never raise; the affected step is skipped and
the caller gets the unfiltered (or unsorted) data instead.

A *filter schema* maps public filter names to predicate definitions::

    JOB_FILTERS = {
        "search": TextSearch(("title", "company_name")),
        "status": Membership("status"),
        "salary_min": AtLeast("salary_max"),
        "posted_after": After("posted_date"),
    }

and a *criteria* mapping supplies values for some of those names.  All
active criteria must hold (AND); a list value for a single criterion
matches when any of its entries does (OR).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)

from .models import parse_iso_datetime
from .pagination import Pagination, paginate

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_field(record: Any, name: str) -> Any:
    """Read ``name`` from a mapping or an object, returning None if absent."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


# ============================================================================
# Predicates
# ============================================================================

class Predicate:
    """Base class for a single filter dimension.

    ``prepare`` normalizes a raw criterion and returns None when the
    criterion is absent or malformed, which disables the predicate.
    ``matches`` is only called with prepared criteria.
    """

    def prepare(self, value: Any) -> Any:
        raise NotImplementedError

    def matches(self, record: Any, criterion: Any) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class TextSearch(Predicate):
    """Case-insensitive substring search across several fields.

    List-valued fields (tags) match when any element contains the text.
    """

    fields: Tuple[str, ...]

    def prepare(self, value: Any) -> Optional[str]:
        if not isinstance(value, str) or not value:
            return None
        return value.lower()

    def matches(self, record: Any, criterion: str) -> bool:
        for name in self.fields:
            value = get_field(record, name)
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                if any(criterion in str(item).lower() for item in value):
                    return True
            elif criterion in str(value).lower():
                return True
        return False


@dataclass(frozen=True)
class Membership(Predicate):
    """The field must equal (or contain) one of the requested values."""

    field: str
    ignore_case: bool = False
    substring: bool = False

    def _normalize(self, value: Any) -> Any:
        value = _plain(value)
        if (self.ignore_case or self.substring) and isinstance(value, str):
            return value.lower()
        return value

    def prepare(self, value: Any) -> Optional[List[Any]]:
        if value is None:
            return None
        if isinstance(value, (list, tuple, set, frozenset)):
            values = [self._normalize(v) for v in value if v is not None and v != ""]
        elif value == "":
            values = []
        else:
            values = [self._normalize(value)]
        return values or None

    def matches(self, record: Any, criterion: List[Any]) -> bool:
        actual = self._normalize(get_field(record, self.field))
        if actual is None:
            return False
        if self.substring:
            text = str(actual)
            return any(str(wanted) in text for wanted in criterion)
        return actual in criterion


def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


@dataclass(frozen=True)
class AtLeast(Predicate):
    """Numeric lower bound; records without a value are excluded."""

    field: str

    def prepare(self, value: Any) -> Optional[float]:
        return _as_number(value)

    def matches(self, record: Any, criterion: float) -> bool:
        actual = _as_number(get_field(record, self.field))
        return actual is not None and actual >= criterion


@dataclass(frozen=True)
class AtMost(Predicate):
    """Numeric upper bound; records without a value are excluded."""

    field: str

    def prepare(self, value: Any) -> Optional[float]:
        return _as_number(value)

    def matches(self, record: Any, criterion: float) -> bool:
        actual = _as_number(get_field(record, self.field))
        return actual is not None and actual <= criterion


@dataclass(frozen=True)
class After(Predicate):
    """The record's timestamp must be strictly later than the criterion."""

    field: str

    def prepare(self, value: Any):
        return parse_iso_datetime(value)

    def matches(self, record: Any, criterion) -> bool:
        actual = parse_iso_datetime(get_field(record, self.field))
        return actual is not None and actual > criterion


@dataclass(frozen=True)
class Before(Predicate):
    """The record's timestamp must be strictly earlier than the criterion."""

    field: str

    def prepare(self, value: Any):
        return parse_iso_datetime(value)

    def matches(self, record: Any, criterion) -> bool:
        actual = parse_iso_datetime(get_field(record, self.field))
        return actual is not None and actual < criterion


FilterSchema = Mapping[str, Predicate]


def filter_records(
    records: Iterable[T],
    criteria: Optional[Mapping[str, Any]],
    schema: FilterSchema,
) -> List[T]:
    """Return the records satisfying every active criterion.

    The input is never modified; a new list is always returned.

    Args:
        records: Collection to filter.
        criteria: Filter name to criterion value. Names missing from
            ``schema`` and absent/malformed values are ignored.
        schema: Filter name to predicate definition.

    Returns:
        The matching records, in their original order.
    """
    active: List[Tuple[Predicate, Any]] = []
    for name, value in (criteria or {}).items():
        predicate = schema.get(name)
        if predicate is None:
            if value is not None:
                logger.debug("Ignoring unknown filter %r", name)
            continue
        criterion = predicate.prepare(value)
        if criterion is None:
            continue
        active.append((predicate, criterion))

    return [
        record
        for record in records
        if all(predicate.matches(record, criterion) for predicate, criterion in active)
    ]


# ============================================================================
# Sorting
# ============================================================================

class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _text_key(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


def _date_key(value: Any) -> Optional[float]:
    parsed = parse_iso_datetime(value)
    return parsed.timestamp() if parsed is not None else None


@dataclass(frozen=True)
class SortOption:
    """A named ordering over one field.

    Attributes:
        field: Field to sort on.
        direction: Ascending or descending.
        kind: ``"text"`` (case-insensitive), ``"number"``, ``"date"`` or
            ``"rank"`` (position within ``ranking``).
        default: Value substituted for records missing the field. When
            None, such records are placed last.
        ranking: Explicit order used by ``kind="rank"``.
    """

    field: str
    direction: SortDirection = SortDirection.ASC
    kind: str = "text"
    default: Any = None
    ranking: Tuple[str, ...] = ()

    def key_for(self, record: Any) -> Any:
        value = _plain(get_field(record, self.field))
        if value is None:
            value = self.default
        if value is None:
            return None
        if self.kind == "number":
            return _as_number(value)
        if self.kind == "date":
            return _date_key(value)
        if self.kind == "rank":
            return self.ranking.index(value) if value in self.ranking else len(self.ranking)
        return _text_key(value)


def _stable_sort(records: List[T], key: Callable[[T], Any], descending: bool) -> List[T]:
    keyed = [(key(record), record) for record in records]
    present = [(k, r) for k, r in keyed if k is not None]
    missing = [r for k, r in keyed if k is None]
    try:
        # sorted() stays stable with reverse=True, so ties keep input order
        ordered = sorted(present, key=lambda pair: pair[0], reverse=descending)
    except TypeError as e:
        logger.debug("Records are not comparable, leaving order unchanged: %s", e)
        return list(records)
    return [r for _, r in ordered] + missing


def sort_records(
    records: Iterable[T],
    key: Optional[str],
    direction: Any = SortDirection.ASC,
) -> List[T]:
    """Stable sort on a single field.

    Strings compare case-insensitively; records lacking the field go
    last. An empty key, an unknown direction or values that cannot be
    compared leave the order unchanged.
    """
    items = list(records)
    if not key:
        return items
    try:
        direction = SortDirection(_plain(direction))
    except ValueError:
        logger.debug("Ignoring unknown sort direction %r", direction)
        return items
    return _stable_sort(
        items,
        lambda record: _text_key(_plain(get_field(record, key))),
        direction is SortDirection.DESC,
    )


def sort_by_option(
    records: Iterable[T],
    option_name: Optional[str],
    options: Mapping[str, SortOption],
) -> List[T]:
    """Sort using a named option from ``options``; unknown names do nothing."""
    items = list(records)
    option = options.get(option_name) if option_name else None
    if option is None:
        if option_name:
            logger.debug("Ignoring unknown sort option %r", option_name)
        return items
    return _stable_sort(items, option.key_for, option.direction is SortDirection.DESC)


# ============================================================================
# Query
# ============================================================================

@dataclass
class Page(Generic[T]):
    """One page of a filtered and sorted collection."""

    data: List[T]
    pagination: Pagination
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self, serialize: Optional[Callable[[T], Any]] = None) -> Dict[str, Any]:
        serialize = serialize or (lambda item: item.to_dict())
        return {
            "data": [serialize(item) for item in self.data],
            "pagination": self.pagination.to_dict(),
            **self.extra,
        }


def query(
    records: Sequence[T],
    criteria: Optional[Mapping[str, Any]] = None,
    schema: Optional[FilterSchema] = None,
    sort_by: Optional[str] = None,
    sort_options: Optional[Mapping[str, SortOption]] = None,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
) -> Page[T]:
    """Filter, sort and paginate ``records`` in one call."""
    matched = filter_records(records, criteria, schema or {})
    ordered = sort_by_option(matched, sort_by, sort_options or {})
    items, pagination = paginate(ordered, page, page_size)
    return Page(data=items, pagination=pagination)
