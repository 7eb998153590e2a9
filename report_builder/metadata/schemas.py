"""Pydantic schemas for the metadata module."""

from typing import List

from report_builder.builder.configuration import ReportConfiguration
from report_builder.catalog.schemas import CategoryRead, ReportCatalog
from report_builder.core.schemas import CamelModel


class DatabaseTable(CamelModel):
    name: str
    label: str


class TableField(CamelModel):
    name: str
    label: str
    type: str


class DataSourceRead(CamelModel):
    name: str
    label: str
    description: str = ""


class DataFieldRead(CamelModel):
    name: str
    label: str
    type: str = ""
    is_numeric: bool = False


class JoinedFieldsRequest(CamelModel):
    join_query: str = ""


class JoinedFieldsRead(CamelModel):
    tables: List[str]
    fields: List[str]


class ReportBuilderData(CamelModel):
    """Everything the builder screen needs on first load."""

    categories: List[CategoryRead]
    report_catalog: ReportCatalog
    data_sources: List[DataSourceRead]
    available_tables: List[str]
    available_fields: List[str]
    default_configuration: ReportConfiguration
