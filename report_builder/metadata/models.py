"""Registered data sources and their curated field lists."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from report_builder.core.database import Base


class DataSource(Base):
    """A table offered in the data source picker, with an optional display name."""

    __tablename__ = "data_sources"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    display_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)

    fields = relationship("DataField", back_populates="data_source", cascade="all, delete-orphan")


class DataField(Base):
    __tablename__ = "data_fields"

    id = Column(Integer, primary_key=True, index=True)
    data_source_id = Column(Integer, ForeignKey("data_sources.id"), nullable=False, index=True)
    field_name = Column(String(255), nullable=False)
    field_label = Column(String(255), nullable=True)
    field_type = Column(String(64), nullable=True)
    is_numeric = Column(Boolean, nullable=False, default=False)

    data_source = relationship("DataSource", back_populates="fields")
