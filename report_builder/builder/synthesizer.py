# report_builder/builder/synthesizer.py
"""
Turns a ReportConfiguration into SQL text.

The output is built clause by clause in SQL grammar order:

    SELECT <select-list | *>
    FROM <data source>
    [<join fragment>]
    [WHERE ...]
    [GROUP BY ...]
    [HAVING ...]
    [ORDER BY ...];

Each optional clause is left out entirely when it has no content. The function
never raises: an empty configuration still produces ``SELECT *\\nFROM ;``.
Nothing here checks identifiers against the database or escapes values.
"""

from typing import Iterable, List

import sqlparse

from report_builder.builder.configuration import FilterCondition, ReportConfiguration, to_sql_operator

DEFAULT_SORT_ORDER = "ASC"


def build_select_list(config: ReportConfiguration) -> List[str]:
    """Print fields, then joined print fields, then ``SUM`` aggregates."""
    select_fields = list(config.print_order_fields)
    select_fields.extend(config.joined_print_order_fields)
    select_fields.extend(f"SUM({field}) AS total_{field}" for field in config.summary_fields)
    return select_fields


def render_condition(condition: FilterCondition, quote: bool) -> str:
    sql_operator = to_sql_operator(condition.operator)
    value = f"'{condition.value}'" if quote else condition.value
    return f"{condition.field} {sql_operator} {value}"


def render_conditions(conditions: Iterable[FilterCondition], quote: bool) -> List[str]:
    """Render only the complete triples; a triple with any empty member is dropped."""
    return [render_condition(c, quote) for c in conditions if c.is_complete()]


def build_order_by(sort_fields: List[str], sort_orders: List[str]) -> List[str]:
    order_by = []
    for index, field in enumerate(sort_fields):
        order = sort_orders[index] if index < len(sort_orders) else ""
        order_by.append(f"{field} {order or DEFAULT_SORT_ORDER}")
    return order_by


def synthesize(config: ReportConfiguration) -> str:
    """Generate the SQL statement for a report configuration."""
    select_fields = build_select_list(config)
    query = "SELECT " + (", ".join(select_fields) if select_fields else "*")

    query += f"\nFROM {config.data_source}"

    if config.join_query.strip():
        query += f"\n{config.join_query}"

    where_conditions = render_conditions(config.filter_conditions, quote=True)
    if where_conditions:
        query += f"\nWHERE {' AND '.join(where_conditions)}"

    group_by_fields = [*config.group_by_fields, *config.joined_group_by_fields]
    if group_by_fields:
        query += f"\nGROUP BY {', '.join(group_by_fields)}"

    # HAVING values are numeric literals, so they stay unquoted
    having_conditions = render_conditions(config.aggregate_filters, quote=False)
    having_conditions.extend(render_conditions(config.joined_aggregate_filters, quote=False))
    if having_conditions:
        query += f"\nHAVING {' AND '.join(having_conditions)}"

    if config.sort_fields:
        query += f"\nORDER BY {', '.join(build_order_by(config.sort_fields, config.sort_orders))}"

    return query + ";"


def format_sql(sql: str) -> str:
    """Pretty-printed copy of generated SQL for display."""
    return sqlparse.format(sql, reindent=True, keyword_case="upper")
