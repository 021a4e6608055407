"""
Lecture list filtering.

A lecture is shown when ALL applicable stages pass:
    1. its class equals the selected standard (case-insensitive, always applied)
    2. subject query set   -> subject contains the query
    3. global query set    -> title OR subject contains the query

Stages 2 and 3 are skipped when their query is blank after stripping.
Missing fields never raise; they simply fail the stage (fail-closed).
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from lecturehub.model import FilterCriteria, Record

# "standard" is accepted when a document has no "class" field
CLASS_FIELDS = ("class", "standard")


def _text(value: Any) -> Optional[str]:
    """
    Return a field value as text, or None if it is missing/unusable.

    Numbers are compared by their string form (Firestore often stores the
    class as an integer).
    """
    if value is None or isinstance(value, (bool, dict, list)):
        return None
    return str(value)


def record_class(record: Mapping[str, Any]) -> Optional[str]:
    for key in CLASS_FIELDS:
        value = _text(record.get(key))
        if value is not None:
            return value
    return None


def _contains(value: Any, query_folded: str) -> bool:
    text = _text(value)
    return text is not None and query_folded in text.casefold()


def matches(record: Mapping[str, Any], criteria: FilterCriteria) -> bool:
    standard = (criteria.standard or "").casefold()
    if not standard:
        return False

    cls = record_class(record)
    if cls is None or cls.casefold() != standard:
        return False

    # strip() only decides whether a stage applies; the query is matched as typed
    if criteria.subject_query.strip():
        if not _contains(record.get("subject"), criteria.subject_query.casefold()):
            return False

    if criteria.global_query.strip():
        q = criteria.global_query.casefold()
        if not (_contains(record.get("title"), q) or _contains(record.get("subject"), q)):
            return False

    return True


def filter_records(records: Iterable[Record], criteria: FilterCriteria) -> list[Record]:
    """
    Apply `matches` to a whole batch, keeping batch order.

    This is a full linear scan on every call; batches are small
    (tens to a few hundred lectures).
    """
    return [r for r in records if matches(r, criteria)]
