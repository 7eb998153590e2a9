# report_builder/metadata/dao.py
"""Data Access Objects for schema introspection and the data source registry."""

from typing import Dict, List

from sqlalchemy import func, inspect, select
from sqlalchemy.exc import NoSuchTableError
from sqlalchemy.orm import Session

from report_builder.core.base_dao import BaseDAO
from report_builder.metadata.models import DataField, DataSource


class SchemaDAO:
    """Reads table and column metadata of the bound database."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def get_table_names(self) -> List[str]:
        """Base tables (views excluded), sorted by name."""
        return sorted(inspect(self.db.get_bind()).get_table_names())

    def get_columns(self, table_name: str) -> List[Dict[str, str]]:
        """Columns in ordinal order; an unknown table yields an empty list."""
        # A fresh inspector per call, so tables created after startup are visible
        inspector = inspect(self.db.get_bind())
        try:
            columns = inspector.get_columns(table_name)
        except NoSuchTableError:
            return []
        return [{"name": column["name"], "type": str(column["type"])} for column in columns]


class DataSourceDAO(BaseDAO[DataSource]):
    """DAO for DataSource operations."""

    def __init__(self, db_session: Session):
        super().__init__(DataSource, db_session)

    def get_all_ordered(self) -> List[DataSource]:
        label = func.coalesce(DataSource.display_name, DataSource.name)
        stmt = select(DataSource).order_by(label, DataSource.name)
        return list(self.db.execute(stmt).scalars().all())

    def get_fields_for_source(self, name: str) -> List[DataField]:
        stmt = (
            select(DataField)
            .join(DataSource, DataField.data_source_id == DataSource.id)
            .where(DataSource.name == name)
            .order_by(DataField.field_name)
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_distinct_field_names(self) -> List[str]:
        stmt = select(DataField.field_name).distinct().order_by(DataField.field_name)
        return list(self.db.execute(stmt).scalars().all())
