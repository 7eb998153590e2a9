# report_builder/metadata/router.py
"""API router for database metadata and the initial builder payload."""

from typing import Dict, List

from fastapi import APIRouter, Depends, Request

from report_builder.catalog.router import get_catalog_service
from report_builder.catalog.service import CatalogService
from report_builder.core.dependencies import SessionDep, SettingsDep
from report_builder.core.schemas import ApiResponse, ok
from report_builder.metadata.dao import DataSourceDAO, SchemaDAO
from report_builder.metadata.schemas import (
    DatabaseTable,
    DataFieldRead,
    DataSourceRead,
    JoinedFieldsRead,
    JoinedFieldsRequest,
    ReportBuilderData,
    TableField,
)
from report_builder.metadata.service import MetadataService

router = APIRouter(tags=["metadata"])


# ===== DEPENDENCY INJECTION =====


def get_metadata_service(request: Request, db: SessionDep, settings: SettingsDep) -> MetadataService:
    return MetadataService(
        SchemaDAO(db),
        DataSourceDAO(db),
        request.app.state.column_cache,
        max_workers=settings.metadata_lookup_workers,
    )


# ===== BUILDER PAYLOAD =====


@router.get("/report-builder/initial", response_model=ApiResponse[ReportBuilderData])
async def get_initial_payload(
    service: MetadataService = Depends(get_metadata_service),
    catalog_service: CatalogService = Depends(get_catalog_service),
):
    """Catalog, data sources, fields and the default configuration in one response."""
    return ok(await service.build_initial_payload(catalog_service))


# ===== DATA SOURCE ENDPOINTS =====


@router.get("/v1/data-sources", response_model=ApiResponse[Dict[str, List[DataSourceRead]]])
def get_data_sources(service: MetadataService = Depends(get_metadata_service)):
    return ok({"dataSources": service.list_data_sources()})


@router.get("/data-sources/{name}/fields", response_model=ApiResponse[List[DataFieldRead]])
def get_data_source_fields(name: str, service: MetadataService = Depends(get_metadata_service)):
    return ok(service.list_data_source_fields(name))


# ===== SCHEMA ENDPOINTS =====


@router.get("/v1/database-tables", response_model=ApiResponse[Dict[str, List[DatabaseTable]]])
def get_database_tables(service: MetadataService = Depends(get_metadata_service)):
    return ok({"tables": service.list_tables()})


@router.get("/v1/database-tables/{table_name}/fields", response_model=ApiResponse[Dict[str, List[TableField]]])
def get_table_fields(table_name: str, service: MetadataService = Depends(get_metadata_service)):
    return ok({"fields": service.list_columns(table_name)})


@router.post("/v1/joined-fields", response_model=ApiResponse[JoinedFieldsRead])
def get_joined_fields(request: JoinedFieldsRequest, service: MetadataService = Depends(get_metadata_service)):
    """Columns of the tables referenced by a manual JOIN fragment."""
    return ok(service.resolve_joined_fields(request.join_query))
