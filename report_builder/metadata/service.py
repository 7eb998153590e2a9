# report_builder/metadata/service.py
"""Service layer for database metadata used by the builder pickers."""

import logging
from typing import List

from fastapi import HTTPException

from report_builder.builder.configuration import ReportConfiguration
from report_builder.catalog.service import CatalogService
from report_builder.metadata.dao import DataSourceDAO, SchemaDAO
from report_builder.metadata.resolver import JoinedFieldResolver, TableColumnCache
from report_builder.metadata.schemas import (
    DatabaseTable,
    DataFieldRead,
    DataSourceRead,
    JoinedFieldsRead,
    ReportBuilderData,
    TableField,
)

logger = logging.getLogger(__name__)


def format_table_label(name: str) -> str:
    """``customer_records`` -> ``Customer Records``."""
    return " ".join(segment[:1].upper() + segment[1:] for segment in name.split("_"))


class MetadataService:
    """Table/column listings, the data source registry and joined-field lookups."""

    def __init__(
        self,
        schema_dao: SchemaDAO,
        data_source_dao: DataSourceDAO,
        column_cache: TableColumnCache,
        max_workers: int = 4,
    ):
        self.schema_dao = schema_dao
        self.data_source_dao = data_source_dao
        self.resolver = JoinedFieldResolver(self._column_names, column_cache, max_workers=max_workers)

    # ===== SCHEMA INTROSPECTION =====

    def list_tables(self) -> List[DatabaseTable]:
        return [
            DatabaseTable(name=name, label=format_table_label(name))
            for name in self.schema_dao.get_table_names()
        ]

    def list_columns(self, table_name: str) -> List[TableField]:
        columns = self.schema_dao.get_columns(table_name)
        if not columns:
            raise HTTPException(status_code=404, detail="Table not found or has no columns.")
        return [TableField(name=c["name"], label=c["name"], type=c["type"]) for c in columns]

    def resolve_joined_fields(self, join_query: str) -> JoinedFieldsRead:
        """Columns of every table named after JOIN/FROM in the fragment, deduplicated."""
        resolved = self.resolver.resolve(join_query)
        logger.debug("Join fragment references %s -> %d fields", resolved.tables, len(resolved.fields))
        return JoinedFieldsRead(tables=resolved.tables, fields=resolved.fields)

    def _column_names(self, table_name: str) -> List[str]:
        return [column["name"] for column in self.schema_dao.get_columns(table_name)]

    # ===== DATA SOURCE REGISTRY =====

    def list_data_sources(self) -> List[DataSourceRead]:
        return [
            DataSourceRead(
                name=source.name,
                label=source.display_name or source.name,
                description=source.description or "",
            )
            for source in self.data_source_dao.get_all_ordered()
        ]

    def list_data_source_fields(self, name: str) -> List[DataFieldRead]:
        return [
            DataFieldRead(
                name=field.field_name,
                label=field.field_label or field.field_name,
                type=field.field_type or "",
                is_numeric=bool(field.is_numeric),
            )
            for field in self.data_source_dao.get_fields_for_source(name)
        ]

    # ===== INITIAL BUILDER PAYLOAD =====

    async def build_initial_payload(self, catalog_service: CatalogService) -> ReportBuilderData:
        data_sources = self.list_data_sources()
        default_configuration = await catalog_service.get_default_configuration()
        default_configuration = self._with_data_source_fallback(default_configuration, data_sources)

        return ReportBuilderData(
            categories=await catalog_service.get_categories(),
            report_catalog=await catalog_service.get_report_catalog(),
            data_sources=data_sources,
            available_tables=[source.label for source in data_sources],
            available_fields=self.data_source_dao.get_distinct_field_names(),
            default_configuration=default_configuration,
        )

    @staticmethod
    def _with_data_source_fallback(
        configuration: ReportConfiguration, data_sources: List[DataSourceRead]
    ) -> ReportConfiguration:
        """Fill the data source (and its label) from the registry when the stored row has none."""
        if configuration.has_data_source():
            data_source = configuration.data_source
        else:
            data_source = data_sources[0].name if data_sources else ""
        label = configuration.data_source_label or next(
            (s.label for s in data_sources if s.name == data_source), ""
        )
        return configuration.model_copy(update={"data_source": data_source, "data_source_label": label})
