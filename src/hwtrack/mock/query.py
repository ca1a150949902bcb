"""
Search and pagination over mock records.

Results always keep the store's insertion order.
"""

from collections.abc import Iterable, Sequence
from fnmatch import fnmatchcase
from typing import Any, TypeVar

from hwtrack.config import DEFAULT_PAGE_SIZE
from hwtrack.mock.records import AssetRecord
from hwtrack.types import SEARCHABLE_FIELDS, Status

T = TypeVar("T")

# Record attributes searchable besides the custom fields
ATTRIBUTE_FIELDS = ("name", "id")


def _field_value(record: AssetRecord, field: str) -> Any:
    if field == "name":
        return record.name
    if field == "id":
        return record.id
    field_id = SEARCHABLE_FIELDS[field]
    if not record.has_custom_field(field_id):
        return None
    return record.custom_value(field_id)


def matches(
    value: Any, keyword: str, case_sensitive: bool = False, exact_match: bool = False
) -> bool:
    """
    Compare a field value against a keyword.

    exact_match requires equality. Otherwise the keyword must be contained
    in the value, or, when it holds "*" or "?", match it as a shell pattern.
    """
    if value is None:
        return False
    text = str(value)
    if not case_sensitive:
        text = text.casefold()
        keyword = keyword.casefold()
    if exact_match:
        return text == keyword
    if "*" in keyword or "?" in keyword:
        return fnmatchcase(text, keyword)
    return keyword in text


def search(
    records: Iterable[AssetRecord],
    field: str,
    keyword: str,
    status: Status | None = None,
    case_sensitive: bool = False,
    exact_match: bool = False,
) -> list[AssetRecord]:
    """
    Return the records whose `field` matches `keyword`.

    Args:
        records: Records to scan, usually RecordStore.all()
        field: A searchable custom field key (see SEARCHABLE_FIELDS), "name" or "id"
        keyword: Value to look for
        status: Only keep records with this status; None keeps all
        case_sensitive: Compare without case folding
        exact_match: Require equality instead of containment

    Records that do not carry the field are skipped.

    Raises:
        ValueError: If `field` is not searchable.
    """
    if field not in SEARCHABLE_FIELDS and field not in ATTRIBUTE_FIELDS:
        raise ValueError(f"Unsupported search field: {field}")

    results = []
    for record in records:
        if status is not None and record.status != status:
            continue
        if matches(_field_value(record, field), keyword, case_sensitive, exact_match):
            results.append(record)
    return results


def filter_by_status(records: Iterable[AssetRecord], status: Status | None) -> list[AssetRecord]:
    if status is None:
        return list(records)
    return [record for record in records if record.status == status]


def paginate(
    sequence: Sequence[T],
    offset: int | None = 0,
    limit: int | None = None,
    default_limit: int = DEFAULT_PAGE_SIZE,
) -> tuple[list[T], int]:
    """
    Slice one page out of a sequence.

    Returns (page, total_count). A missing or negative limit falls back to
    default_limit; an offset past the end yields an empty page.
    """
    total = len(sequence)
    start = max(offset or 0, 0)
    if limit is None or limit < 0:
        limit = default_limit
    return list(sequence[start : start + limit]), total
