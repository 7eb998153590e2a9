"""Pydantic schemas for the catalog module (categories, reports, configurations)."""

from typing import Dict, List, Optional
from datetime import datetime

from pydantic import field_validator

from report_builder.builder.configuration import ReportConfiguration
from report_builder.core.schemas import CamelModel


def _validate_name(v: str, label: str) -> str:
    if not v or not v.strip():
        raise ValueError(f"{label} name cannot be empty")
    if len(v.strip()) > 255:
        raise ValueError(f"{label} name cannot exceed 255 characters")
    return v.strip()


# ===== CATEGORY SCHEMAS =====


class CategoryCreate(CamelModel):
    name: str
    description: Optional[str] = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _validate_name(v, "Category")


class CategoryUpdate(CategoryCreate):
    id: int


class CategoryRead(CamelModel):
    id: str
    name: str
    description: str = ""
    report_count: int = 0
    product_count: int = 0
    display_order: int = 0


# ===== REPORT SCHEMAS =====


class ReportCreate(CamelModel):
    category_id: int
    name: str
    number: Optional[str] = ""
    description: Optional[str] = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _validate_name(v, "Report")


class ReportRead(CamelModel):
    id: str
    name: str
    number: str = ""
    description: str = ""
    status: str
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ===== CONFIGURATION SCHEMAS =====


class SaveReportConfigurationRequest(CamelModel):
    category_name: str
    report_name: str
    configuration: ReportConfiguration


class UpdateReportConfigurationRequest(CamelModel):
    configuration: ReportConfiguration


class PreviewQueryRequest(CamelModel):
    configuration: ReportConfiguration


class SavedReportConfiguration(CamelModel):
    report_id: str
    report_name: str
    category_id: str
    created_at: Optional[datetime] = None


class ReportConfigurationEnvelope(CamelModel):
    configuration: ReportConfiguration


class GeneratedQuery(CamelModel):
    sql: str
    formatted_sql: str


class CatalogStats(CamelModel):
    total_reports: int
    total_categories: int


class DeletedRows(CamelModel):
    deleted_reports: int = 0
    deleted_configurations: int = 0
    deleted_categories: int = 0


ReportCatalog = Dict[str, List[ReportRead]]
