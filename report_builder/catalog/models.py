# report_builder/catalog/models.py
"""Categories, reports and their stored configurations."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from report_builder.core.database import Base


class Category(Base):
    """A named group of reports shown in the category picker."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    reports = relationship("Report", back_populates="category")


class Report(Base):
    """A report definition; its query lives in the one-to-one configuration row."""

    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    report_number = Column(String(32), nullable=True)
    description = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="draft")  # 'draft', 'active' or 'deleted'
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    category = relationship("Category", back_populates="reports")
    configuration = relationship("ReportConfigurationRecord", back_populates="report", uselist=False)


class ReportConfigurationRecord(Base):
    """Stored form of a report configuration: JSON-array text for lists, plain text for scalars."""

    __tablename__ = "report_configurations"

    id = Column(Integer, primary_key=True, index=True)
    report_id = Column(Integer, ForeignKey("reports.id"), nullable=False, unique=True, index=True)

    data_source = Column(String(255), nullable=True)
    data_source_label = Column(String(255), nullable=True)
    selected_tables = Column(Text, nullable=True)
    selected_fields = Column(Text, nullable=True)
    print_order_fields = Column(Text, nullable=True)
    summary_fields = Column(Text, nullable=True)
    filter_conditions = Column(Text, nullable=True)
    aggregate_filters = Column(Text, nullable=True)
    sort_fields = Column(Text, nullable=True)
    sort_orders = Column(Text, nullable=True)
    joined_available_fields = Column(Text, nullable=True)
    joined_print_order_fields = Column(Text, nullable=True)

    # Extended schema
    group_by_fields = Column(Text, nullable=True)
    joined_group_by_fields = Column(Text, nullable=True)
    joined_aggregate_filters = Column(Text, nullable=True)
    join_query = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    report = relationship("Report", back_populates="configuration")


class Product(Base):
    """Products listed under a category; only counted by the category listing."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
