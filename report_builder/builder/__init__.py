"""Report configuration model, SQL synthesis and storage round-trip."""

from .configuration import (
    ComparisonOperator,
    FilterCondition,
    RawSqlFragment,
    ReportConfiguration,
    add_unique,
    to_sql_operator,
)
from .join_parser import extract_table_names
from .serialization import (
    LEGACY_DEFAULTS,
    STORED_FIELDS,
    deserialize,
    deserialize_default_configuration,
    serialize,
)
from .synthesizer import format_sql, synthesize

__all__ = [
    "ComparisonOperator",
    "FilterCondition",
    "RawSqlFragment",
    "ReportConfiguration",
    "add_unique",
    "to_sql_operator",
    "extract_table_names",
    "LEGACY_DEFAULTS",
    "STORED_FIELDS",
    "deserialize",
    "deserialize_default_configuration",
    "serialize",
    "format_sql",
    "synthesize",
]
