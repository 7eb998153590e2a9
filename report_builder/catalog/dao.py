# report_builder/catalog/dao.py
"""Data Access Objects for categories, reports and stored configurations."""

from typing import List, Optional, Tuple

from sqlalchemy import and_, distinct, func, select
from sqlalchemy.orm import Session

from report_builder.catalog.models import Category, Product, Report, ReportConfigurationRecord
from report_builder.core.base_dao import BaseDAO


class CategoryDAO(BaseDAO[Category]):
    """DAO for Category operations."""

    def __init__(self, db_session: Session):
        super().__init__(Category, db_session)

    def get_by_name(self, name: str) -> Optional[Category]:
        return self.get_by_field("name", name)

    def get_all_with_counts(self) -> List[Tuple[Category, int, int]]:
        """Active categories with their non-deleted report and active product counts."""
        stmt = (
            select(
                Category,
                func.count(distinct(Report.id)).label("report_count"),
                func.count(distinct(Product.id)).label("product_count"),
            )
            .outerjoin(Report, and_(Report.category_id == Category.id, Report.status != "deleted"))
            .outerjoin(Product, and_(Product.category_id == Category.id, Product.is_active == True))
            .where(Category.is_active == True)
            .group_by(Category.id)
            .order_by(Category.display_order, Category.name)
        )
        rows = self.db.execute(stmt).all()
        return [(row[0], row.report_count or 0, row.product_count or 0) for row in rows]

    def next_display_order(self) -> int:
        current = self.db.execute(select(func.max(Category.display_order))).scalar()
        return 0 if current is None else current + 1


class ReportDAO(BaseDAO[Report]):
    """DAO for Report operations."""

    def __init__(self, db_session: Session):
        super().__init__(Report, db_session)

    def get_visible(self) -> List[Report]:
        """All reports that are not deleted, newest first."""
        stmt = (
            select(Report)
            .where(Report.status != "deleted")
            .order_by(Report.created_at.desc(), Report.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())


class ReportConfigurationDAO(BaseDAO[ReportConfigurationRecord]):
    """DAO for the one-per-report configuration rows."""

    def __init__(self, db_session: Session):
        super().__init__(ReportConfigurationRecord, db_session)

    def get_by_report_id(self, report_id: int) -> Optional[ReportConfigurationRecord]:
        return self.get_by_field("report_id", report_id)

    def get_first(self) -> Optional[ReportConfigurationRecord]:
        stmt = select(ReportConfigurationRecord).order_by(ReportConfigurationRecord.id).limit(1)
        return self.db.execute(stmt).scalars().first()

    def delete_by_report_id(self, report_id: int) -> int:
        record = self.get_by_report_id(report_id)
        if not record:
            return 0
        self.db.delete(record)
        self.db.flush()
        return 1
