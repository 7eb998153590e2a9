# report_builder/catalog/service.py
"""Service layer for categories, reports and stored report configurations."""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError

from report_builder.builder import (
    ReportConfiguration,
    deserialize,
    deserialize_default_configuration,
    format_sql,
    serialize,
    synthesize,
)
from report_builder.catalog.dao import CategoryDAO, ReportConfigurationDAO, ReportDAO
from report_builder.catalog.models import Category, Report
from report_builder.catalog.schemas import (
    CatalogStats,
    CategoryCreate,
    CategoryRead,
    CategoryUpdate,
    DeletedRows,
    GeneratedQuery,
    ReportCatalog,
    ReportCreate,
    ReportRead,
    SaveReportConfigurationRequest,
    SavedReportConfiguration,
)

logger = logging.getLogger(__name__)


class CatalogService:
    """Category/report CRUD and the save/load cycle of report configurations.

    Writes that touch more than one table (category + report + configuration,
    or the bulk deletes) run in a single transaction: either everything is
    committed or the session is rolled back.
    """

    def __init__(self, category_dao: CategoryDAO, report_dao: ReportDAO, configuration_dao: ReportConfigurationDAO):
        self.category_dao = category_dao
        self.report_dao = report_dao
        self.configuration_dao = configuration_dao
        self.db = category_dao.db

    # ===== CATEGORIES =====

    async def get_categories(self) -> List[CategoryRead]:
        rows = self.category_dao.get_all_with_counts()
        return [
            self._to_category_read(category, report_count, product_count)
            for category, report_count, product_count in rows
        ]

    async def create_category(self, data: CategoryCreate) -> CategoryRead:
        if self.category_dao.get_by_name(data.name):
            raise HTTPException(status_code=409, detail=f"Category '{data.name}' already exists")

        with self._transaction("create category"):
            category = self.category_dao.create(
                commit=False,
                name=data.name,
                description=data.description or "",
                display_order=self.category_dao.next_display_order(),
            )
        self.db.refresh(category)
        logger.info("Created category %s (%s)", category.id, category.name)
        return self._to_category_read(category)

    async def update_category(self, data: CategoryUpdate) -> CategoryRead:
        category = self.category_dao.get_by_id(data.id)
        if not category:
            raise HTTPException(status_code=404, detail="Category not found")

        existing = self.category_dao.get_by_name(data.name)
        if existing and existing.id != category.id:
            raise HTTPException(status_code=409, detail=f"Category '{data.name}' already exists")

        with self._transaction("update category"):
            self.category_dao.update(category, commit=False, name=data.name, description=data.description or "")
        self.db.refresh(category)
        return self._to_category_read(category)

    # ===== REPORTS =====

    async def create_report(self, data: ReportCreate) -> ReportRead:
        if not self.category_dao.get_by_id(data.category_id):
            raise HTTPException(status_code=404, detail="Category not found")

        with self._transaction("create report"):
            report = self._add_report(data.category_id, data.name, data.number, data.description)
        self.db.refresh(report)
        return self._to_report_read(report)

    async def get_report_catalog(self) -> ReportCatalog:
        """Visible reports grouped by their category id."""
        catalog: ReportCatalog = {}
        for report in self.report_dao.get_visible():
            catalog.setdefault(str(report.category_id), []).append(self._to_report_read(report))
        return catalog

    async def delete_report(self, report_id: int) -> DeletedRows:
        """Delete a report and its configuration together."""
        if not self.report_dao.get_by_id(report_id):
            raise HTTPException(status_code=404, detail="Report not found")

        with self._transaction(f"delete report {report_id}"):
            deleted_configurations = self.configuration_dao.delete_by_report_id(report_id)
            self.report_dao.delete(report_id, commit=False)

        return DeletedRows(deleted_reports=1, deleted_configurations=deleted_configurations)

    async def truncate_reports(self) -> DeletedRows:
        with self._transaction("truncate reports"):
            deleted_configurations = self.configuration_dao.delete_all()
            deleted_reports = self.report_dao.delete_all()

        logger.warning("Truncated %d reports and %d configurations", deleted_reports, deleted_configurations)
        return DeletedRows(deleted_reports=deleted_reports, deleted_configurations=deleted_configurations)

    async def truncate_categories(self) -> DeletedRows:
        with self._transaction("truncate categories"):
            deleted_configurations = self.configuration_dao.delete_all()
            deleted_reports = self.report_dao.delete_all()
            deleted_categories = self.category_dao.delete_all()

        logger.warning("Truncated %d categories with %d reports", deleted_categories, deleted_reports)
        return DeletedRows(
            deleted_reports=deleted_reports,
            deleted_configurations=deleted_configurations,
            deleted_categories=deleted_categories,
        )

    async def get_stats(self) -> CatalogStats:
        return CatalogStats(total_reports=self.report_dao.count(), total_categories=self.category_dao.count())

    # ===== REPORT CONFIGURATIONS =====

    async def save_report_configuration(self, request: SaveReportConfigurationRequest) -> SavedReportConfiguration:
        """Find-or-create the category, create the report and store its configuration."""
        category_name = request.category_name.strip()
        report_name = request.report_name.strip()
        if not category_name or not report_name:
            raise HTTPException(status_code=400, detail="Category name and report name are required.")

        with self._transaction("save report configuration"):
            category = self.category_dao.get_by_name(category_name)
            if not category:
                category = self.category_dao.create(
                    commit=False,
                    name=category_name,
                    description="",
                    display_order=self.category_dao.next_display_order(),
                )

            report = self._add_report(category.id, report_name)
            self.configuration_dao.create(commit=False, report_id=report.id, **serialize(request.configuration))

        self.db.refresh(report)
        logger.info("Saved configuration for report %s in category %s", report.id, category.id)
        return SavedReportConfiguration(
            report_id=str(report.id),
            report_name=report.name,
            category_id=str(category.id),
            created_at=report.created_at,
        )

    async def get_report_configuration(self, report_id: int) -> ReportConfiguration:
        if not self.report_dao.get_by_id(report_id):
            raise HTTPException(status_code=404, detail="Report not found")

        record = self.configuration_dao.get_by_report_id(report_id)
        if not record:
            raise HTTPException(status_code=404, detail="Report configuration not found")

        return deserialize(record)

    async def update_report_configuration(
        self, report_id: int, configuration: ReportConfiguration
    ) -> SavedReportConfiguration:
        report = self.report_dao.get_by_id(report_id)
        if not report:
            raise HTTPException(status_code=404, detail="Report not found")

        record = self.configuration_dao.get_by_report_id(report_id)
        if not record:
            raise HTTPException(status_code=404, detail="Report configuration not found")

        with self._transaction(f"update configuration of report {report_id}"):
            self.configuration_dao.update(record, commit=False, **serialize(configuration))
            self.report_dao.update(report, commit=False, version=(report.version or 0) + 1, updated_at=datetime.now())

        self.db.refresh(report)
        return SavedReportConfiguration(
            report_id=str(report.id),
            report_name=report.name,
            category_id=str(report.category_id),
            created_at=report.created_at,
        )

    async def render_report_sql(self, report_id: int) -> GeneratedQuery:
        """Regenerate the SQL of a saved report from its stored configuration."""
        configuration = await self.get_report_configuration(report_id)
        return self.preview_query(configuration)

    def preview_query(self, configuration: ReportConfiguration) -> GeneratedQuery:
        sql = synthesize(configuration)
        return GeneratedQuery(sql=sql, formatted_sql=format_sql(sql))

    async def get_default_configuration(self) -> ReportConfiguration:
        """The first stored configuration, read with the legacy sort defaults."""
        record = self.configuration_dao.get_first()
        return deserialize_default_configuration(record if record is not None else {})

    # ===== HELPERS =====

    @contextmanager
    def _transaction(self, action: str) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except HTTPException:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("Integrity error during %s: %s", action, e.orig)
            raise HTTPException(status_code=409, detail=f"Conflict during {action}") from e
        except Exception:
            self.db.rollback()
            logger.exception("Failed to %s", action)
            raise

    def _add_report(
        self, category_id: int, name: str, number: Optional[str] = None, description: Optional[str] = None
    ) -> Report:
        report = self.report_dao.create(
            commit=False,
            category_id=category_id,
            name=name,
            report_number=(number or "").strip() or None,
            description=description or "",
            status="draft",
            version=1,
        )
        if not report.report_number:
            report.report_number = f"RPT-{report.id:03d}"
            self.db.flush()
        return report

    @staticmethod
    def _to_category_read(category: Category, report_count: int = 0, product_count: int = 0) -> CategoryRead:
        return CategoryRead(
            id=str(category.id),
            name=category.name,
            description=category.description or "",
            report_count=report_count,
            product_count=product_count,
            display_order=category.display_order or 0,
        )

    @staticmethod
    def _to_report_read(report: Report) -> ReportRead:
        return ReportRead(
            id=str(report.id),
            name=report.name,
            number=report.report_number or "",
            description=report.description or "",
            status=report.status,
            version=report.version,
            created_at=report.created_at,
            updated_at=report.updated_at,
        )
