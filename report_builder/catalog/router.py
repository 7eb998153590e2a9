# report_builder/catalog/router.py
"""API router for categories, reports and report configurations."""

from typing import Dict, List

from fastapi import APIRouter, Depends

from report_builder.catalog.dao import CategoryDAO, ReportConfigurationDAO, ReportDAO
from report_builder.catalog.schemas import (
    CatalogStats,
    CategoryCreate,
    CategoryRead,
    CategoryUpdate,
    DeletedRows,
    GeneratedQuery,
    PreviewQueryRequest,
    ReportConfigurationEnvelope,
    ReportCreate,
    ReportRead,
    SaveReportConfigurationRequest,
    SavedReportConfiguration,
    UpdateReportConfigurationRequest,
)
from report_builder.catalog.service import CatalogService
from report_builder.core.dependencies import SessionDep
from report_builder.core.schemas import ApiResponse, ok

router = APIRouter(prefix="/v1", tags=["catalog"])


# ===== DEPENDENCY INJECTION =====


def get_catalog_service(db: SessionDep) -> CatalogService:
    return CatalogService(CategoryDAO(db), ReportDAO(db), ReportConfigurationDAO(db))


# ===== CATEGORY ENDPOINTS =====


@router.get("/get-categories", response_model=ApiResponse[Dict[str, List[CategoryRead]]])
async def get_categories(service: CatalogService = Depends(get_catalog_service)):
    """Active categories with report and product counts."""
    return ok({"categories": await service.get_categories()})


@router.post("/create-category", response_model=ApiResponse[CategoryRead])
async def create_category(data: CategoryCreate, service: CatalogService = Depends(get_catalog_service)):
    return ok(await service.create_category(data), "Category created")


@router.put("/update-category", response_model=ApiResponse[CategoryRead])
async def update_category(data: CategoryUpdate, service: CatalogService = Depends(get_catalog_service)):
    return ok(await service.update_category(data), "Category updated")


@router.delete("/categories", response_model=ApiResponse[DeletedRows])
async def truncate_categories(service: CatalogService = Depends(get_catalog_service)):
    """Delete every category together with all reports and configurations."""
    return ok(await service.truncate_categories(), "All categories deleted")


# ===== REPORT ENDPOINTS =====


@router.post("/create-report", response_model=ApiResponse[ReportRead])
async def create_report(data: ReportCreate, service: CatalogService = Depends(get_catalog_service)):
    return ok(await service.create_report(data), "Report created")


@router.delete("/reports/{report_id}", response_model=ApiResponse[DeletedRows])
async def delete_report(report_id: int, service: CatalogService = Depends(get_catalog_service)):
    """Delete a report and its configuration."""
    return ok(await service.delete_report(report_id), "Report deleted")


@router.delete("/reports", response_model=ApiResponse[DeletedRows])
async def truncate_reports(service: CatalogService = Depends(get_catalog_service)):
    return ok(await service.truncate_reports(), "All reports deleted")


@router.get("/stats", response_model=ApiResponse[CatalogStats])
async def get_stats(service: CatalogService = Depends(get_catalog_service)):
    return ok(await service.get_stats())


# ===== REPORT CONFIGURATION ENDPOINTS =====


@router.post("/save-report-configuration", response_model=ApiResponse[SavedReportConfiguration])
async def save_report_configuration(
    request: SaveReportConfigurationRequest, service: CatalogService = Depends(get_catalog_service)
):
    """Create the category (if needed), the report and its configuration in one go."""
    saved = await service.save_report_configuration(request)
    return ok(saved, "Report configuration saved successfully")


@router.get("/report-configuration/{report_id}", response_model=ApiResponse[ReportConfigurationEnvelope])
async def get_report_configuration(report_id: int, service: CatalogService = Depends(get_catalog_service)):
    configuration = await service.get_report_configuration(report_id)
    return ok(ReportConfigurationEnvelope(configuration=configuration))


@router.put("/report-configuration/{report_id}", response_model=ApiResponse[SavedReportConfiguration])
async def update_report_configuration(
    report_id: int,
    request: UpdateReportConfigurationRequest,
    service: CatalogService = Depends(get_catalog_service),
):
    updated = await service.update_report_configuration(report_id, request.configuration)
    return ok(updated, "Report configuration updated successfully")


@router.get("/report-configuration/{report_id}/sql", response_model=ApiResponse[GeneratedQuery])
async def get_report_sql(report_id: int, service: CatalogService = Depends(get_catalog_service)):
    """SQL regenerated from the stored configuration."""
    return ok(await service.render_report_sql(report_id))


@router.post("/preview-query", response_model=ApiResponse[GeneratedQuery])
async def preview_query(request: PreviewQueryRequest, service: CatalogService = Depends(get_catalog_service)):
    return ok(service.preview_query(request.configuration))
