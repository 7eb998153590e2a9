# report_builder/builder/configuration.py
"""Canonical in-memory shape of a report configuration."""

from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, Field, GetCoreSchemaHandler, ValidationInfo, field_validator
from pydantic_core import core_schema

from report_builder.core.schemas import CamelModel


class ComparisonOperator(str, Enum):
    """Operator vocabulary offered by the filter pickers."""

    EQUAL_TO = "equal to"
    NOT_EQUAL_TO = "not equal to"
    GREATER_THAN = "greater than"
    LESS_THAN = "less than"


OPERATOR_SQL: Dict[str, str] = {
    ComparisonOperator.EQUAL_TO.value: "=",
    ComparisonOperator.NOT_EQUAL_TO.value: "!=",
    ComparisonOperator.GREATER_THAN.value: ">",
    ComparisonOperator.LESS_THAN.value: "<",
}


def to_sql_operator(operator: str) -> str:
    """Map a picker operator to SQL; anything unmapped (``>=``, ``LIKE``...) passes through."""
    return OPERATOR_SQL.get(operator, operator)


class RawSqlFragment(str):
    """Free-text SQL inserted verbatim into generated queries.

    This is trusted operator input. It is never parsed, validated or escaped,
    so it must not be populated from untrusted end users.
    """

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.str_schema(),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )


class FilterCondition(BaseModel):
    """A ``{field, operator, value}`` triple used for WHERE and HAVING conditions."""

    field: str = ""
    operator: str = ""
    value: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    def is_complete(self) -> bool:
        return bool(self.field and self.operator and self.value)


class ReportConfiguration(CamelModel):
    """Everything the builder UI collects for one report.

    A freshly constructed instance is the "new report" state: every list empty
    and no data source. Lists are kept exactly as given; duplicates are not
    removed here or by the synthesizer.
    """

    # Data source
    data_source: str = ""
    data_source_label: str = ""
    selected_tables: List[str] = Field(default_factory=list)

    # Fields & print order
    selected_fields: List[str] = Field(default_factory=list)
    print_order_fields: List[str] = Field(default_factory=list)

    # Fields to sum
    summary_fields: List[str] = Field(default_factory=list)

    # Sort
    sort_fields: List[str] = Field(default_factory=list)
    sort_orders: List[str] = Field(default_factory=list)

    # Filters (WHERE)
    filter_conditions: List[FilterCondition] = Field(default_factory=list)

    # Grouping & aggregate filters (HAVING)
    group_by_fields: List[str] = Field(default_factory=list)
    aggregate_filters: List[FilterCondition] = Field(default_factory=list)

    # Manual join and the columns it brings in
    join_query: RawSqlFragment = RawSqlFragment("")
    joined_available_fields: List[str] = Field(default_factory=list)
    joined_print_order_fields: List[str] = Field(default_factory=list)
    joined_group_by_fields: List[str] = Field(default_factory=list)
    joined_aggregate_filters: List[FilterCondition] = Field(default_factory=list)

    @field_validator("*", mode="before")
    @classmethod
    def null_as_default(cls, v: Any, info: ValidationInfo) -> Any:
        # A JSON null reads as the field's empty value: [] for lists, "" for text
        if v is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return v

    def has_data_source(self) -> bool:
        return bool(self.data_source.strip())


def add_unique(values: List[str], item: str) -> List[str]:
    """Return ``values`` with ``item`` appended unless it is already present."""
    if item in values:
        return list(values)
    return [*values, item]
