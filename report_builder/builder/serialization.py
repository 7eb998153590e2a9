# report_builder/builder/serialization.py
"""Storage form of a ReportConfiguration.

A configuration is stored as one row of text columns: list fields are JSON
arrays, scalar fields are plain text. Loading never fails. A column that is
missing, empty or not a JSON array falls back to an empty list (or a per-field
default) and the problem is logged.
"""

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

from report_builder.builder.configuration import FilterCondition, RawSqlFragment, ReportConfiguration

logger = logging.getLogger(__name__)

SCALAR_FIELDS = ("data_source", "data_source_label", "join_query")

STRING_LIST_FIELDS = (
    "selected_tables",
    "selected_fields",
    "print_order_fields",
    "summary_fields",
    "sort_fields",
    "sort_orders",
    "group_by_fields",
    "joined_available_fields",
    "joined_print_order_fields",
    "joined_group_by_fields",
)

CONDITION_LIST_FIELDS = ("filter_conditions", "aggregate_filters", "joined_aggregate_filters")

STORED_FIELDS = SCALAR_FIELDS + STRING_LIST_FIELDS + CONDITION_LIST_FIELDS

# Rows written before the sort columns existed get these values on the
# default-configuration path.
LEGACY_DEFAULTS: Dict[str, List[str]] = {
    "sort_fields": ["date_recorded", "customer"],
    "sort_orders": ["Ascending", "Descending"],
}


def serialize(config: ReportConfiguration) -> Dict[str, str]:
    """Map each stored column name to its text value."""
    stored: Dict[str, str] = {name: str(getattr(config, name)) for name in SCALAR_FIELDS}

    for name in STRING_LIST_FIELDS:
        stored[name] = json.dumps(list(getattr(config, name)))

    for name in CONDITION_LIST_FIELDS:
        stored[name] = json.dumps(
            [{"field": c.field, "operator": c.operator, "value": c.value} for c in getattr(config, name)]
        )

    return stored


def deserialize(stored: Any, defaults: Optional[Mapping[str, List[str]]] = None) -> ReportConfiguration:
    """Rebuild a configuration from a stored mapping or ORM row."""
    defaults = defaults or {}
    values: Dict[str, Any] = {}

    for name in SCALAR_FIELDS:
        raw = _read(stored, name)
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        values[name] = "" if raw is None else str(raw)
    values["join_query"] = RawSqlFragment(values["join_query"])

    for name in STRING_LIST_FIELDS:
        items = parse_json_column(_read(stored, name), name, defaults.get(name))
        values[name] = _to_strings(items, name)

    for name in CONDITION_LIST_FIELDS:
        items = parse_json_column(_read(stored, name), name, defaults.get(name))
        values[name] = _to_conditions(items, name)

    return ReportConfiguration(**values)


def deserialize_default_configuration(stored: Any) -> ReportConfiguration:
    """Deserialize using the legacy sort defaults for missing sort columns."""
    return deserialize(stored, defaults=LEGACY_DEFAULTS)


def parse_json_column(value: Any, column: str = "", fallback: Optional[List[Any]] = None) -> List[Any]:
    """Decode one JSON-array column, returning a copy of ``fallback`` (or ``[]``) on any problem."""
    fallback_value = list(fallback) if fallback is not None else []

    if value is None or value == "" or value == b"":
        return fallback_value

    if isinstance(value, (list, tuple)):
        return list(value)

    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")

    if not isinstance(value, str):
        logger.warning("Column %s has unexpected type %s; using fallback", column, type(value).__name__)
        return fallback_value

    try:
        decoded = json.loads(value)
    except ValueError as e:
        logger.warning("Failed to parse JSON column %s: %s", column, e)
        return fallback_value

    if not isinstance(decoded, list):
        logger.warning("Column %s does not hold a JSON array; using fallback", column)
        return fallback_value

    return decoded


def _read(stored: Any, name: str) -> Any:
    if isinstance(stored, Mapping):
        return stored.get(name)
    return getattr(stored, name, None)


def _to_strings(items: List[Any], column: str) -> List[str]:
    strings = []
    for item in items:
        if item is None:
            logger.warning("Dropping null entry in %s", column)
        else:
            strings.append(str(item))
    return strings


def _to_conditions(items: List[Any], column: str) -> List[FilterCondition]:
    conditions = []
    for item in items:
        if isinstance(item, FilterCondition):
            conditions.append(item)
        elif isinstance(item, Mapping):
            conditions.append(
                FilterCondition(
                    field=_text(item.get("field")),
                    operator=_text(item.get("operator")),
                    value=_text(item.get("value")),
                )
            )
        else:
            logger.warning("Dropping malformed condition in %s: %r", column, item)
    return conditions


def _text(value: Any) -> str:
    return "" if value is None else str(value)
