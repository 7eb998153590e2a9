# report_builder/core/database.py
"""Database configuration: engine, session factory and table initialization."""

import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)


def create_db_engine(database_url: str) -> Engine:
    """Create an engine, relaxing SQLite's same-thread check for the API workers."""
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {},
    )


def create_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


# Stores categories, reports, report configurations, data sources and request logs
Base = declarative_base()


# ===== SESSION GENERATORS =====


def get_db(request: Request) -> Iterator[Session]:
    """Get a database session from the factory the application was built with."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


# ===== TABLE CREATION =====


def _register_models() -> None:
    # Import models to ensure they're registered with Base
    from report_builder.catalog.models import Category, Report, ReportConfigurationRecord, Product  # noqa: F401
    from report_builder.metadata.models import DataSource, DataField  # noqa: F401
    from report_builder.logging.models import Log  # noqa: F401


def create_all_tables(bind: Engine) -> None:
    _register_models()
    Base.metadata.create_all(bind=bind)
    logger.info("Database tables created")


def drop_all_tables(bind: Engine) -> None:
    """Drop every table (use with caution!)."""
    _register_models()
    Base.metadata.drop_all(bind=bind)
    logger.warning("All database tables dropped")


# ===== SAMPLE DATA CREATION =====


def create_sample_data(session_factory: sessionmaker) -> None:
    """Seed a small demo catalog and data source registry when the database is empty."""
    from report_builder.catalog.models import Category, Report
    from report_builder.metadata.models import DataSource, DataField

    db = session_factory()
    try:
        if db.query(Category).count() > 0:
            logger.info("Sample data already exists. Skipping creation.")
            return

        categories = [
            Category(name=name, description=description, display_order=order)
            for order, (name, description) in enumerate(
                [
                    ("Toyota", "Toyota dealer and fleet reports"),
                    ("Nissan", "Nissan fleet reports"),
                    ("Trucks", "Truck logistics reports"),
                ]
            )
        ]
        db.add_all(categories)
        db.flush()

        db.add_all(
            [
                Report(category_id=categories[0].id, name="Q1 Sales Report", report_number="RPT-018", status="active"),
                Report(category_id=categories[0].id, name="Inventory Summary", report_number="RPT-102", status="active"),
                Report(category_id=categories[1].id, name="Fleet Utilization", report_number="RPT-204", status="draft"),
            ]
        )

        waste = DataSource(
            name="waste_management_data",
            display_name="Waste Management Data",
            description="Collected waste records by zone and customer",
        )
        customers = DataSource(name="customer_records", display_name="Customer Records", description="")
        db.add_all([waste, customers])
        db.flush()

        db.add_all(
            [
                DataField(data_source_id=waste.id, field_name="record_number", field_label="Record Number", field_type="int"),
                DataField(data_source_id=waste.id, field_name="weight_kg", field_label="Weight (kg)", field_type="decimal", is_numeric=True),
                DataField(data_source_id=waste.id, field_name="waste_zone", field_label="Waste Zone", field_type="varchar"),
                DataField(data_source_id=waste.id, field_name="date_recorded", field_label="Date Recorded", field_type="date"),
                DataField(data_source_id=customers.id, field_name="customer_name", field_label="Customer Name", field_type="varchar"),
                DataField(data_source_id=customers.id, field_name="region", field_label="Region", field_type="varchar"),
            ]
        )

        db.commit()
        logger.info("Sample data created: %d categories, 2 data sources", len(categories))
    except Exception:
        db.rollback()
        logger.exception("Error creating sample data")
        raise
    finally:
        db.close()


# ===== INITIALIZATION FUNCTION =====


def init_db(bind: Engine, session_factory: sessionmaker, seed_sample_data: bool = False) -> None:
    """Create tables and optionally seed demo rows."""
    create_all_tables(bind)
    if seed_sample_data:
        create_sample_data(session_factory)
