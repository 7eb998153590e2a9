"""
Test configuration and shared fixtures for the report builder test suite.
Provides database setup, the API test client and sample catalog data.
"""

import pytest
from typing import List
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from report_builder.app import create_app
from report_builder.builder import FilterCondition, RawSqlFragment, ReportConfiguration
from report_builder.catalog.models import Category, Report, Product
from report_builder.core.config import Settings
from report_builder.core.database import create_all_tables, drop_all_tables
from report_builder.metadata.models import DataSource, DataField


# ===== DATABASE SETUP =====

@pytest.fixture(scope="session")
def engine():
    """Create in-memory SQLite engine shared by the whole session"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all_tables(engine)
    return engine


@pytest.fixture(scope="function")
def session_factory(engine):
    """Session factory bound to the test engine; tables are reset after each test"""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield TestingSessionLocal
    drop_all_tables(engine)
    create_all_tables(engine)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def app_settings() -> Settings:
    # One lookup worker: the StaticPool connection is shared by every thread
    return Settings(
        database_url="sqlite:///:memory:",
        application_id="report-builder-tests",
        metadata_lookup_workers=1,
        static_dir="/nonexistent/static",
    )


@pytest.fixture
def app(app_settings, session_factory):
    return create_app(app_settings, session_factory)


@pytest.fixture
def client(app) -> TestClient:
    """Create FastAPI test client against the test database"""
    with TestClient(app) as test_client:
        yield test_client


# ===== SAMPLE DATA FIXTURES =====

@pytest.fixture
def sample_categories(db_session) -> List[Category]:
    categories = [
        Category(name="Toyota", description="Toyota reports", display_order=0),
        Category(name="Nissan", description="", display_order=1),
        Category(name="Archived", description="", display_order=2, is_active=False),
    ]
    db_session.add_all(categories)
    db_session.commit()
    return categories


@pytest.fixture
def sample_reports(db_session, sample_categories) -> List[Report]:
    toyota, nissan, _ = sample_categories
    reports = [
        Report(category_id=toyota.id, name="Q1 Sales Report", report_number="RPT-018", status="active"),
        Report(category_id=toyota.id, name="Old Report", report_number="RPT-001", status="deleted"),
        Report(category_id=nissan.id, name="Fleet Utilization", report_number="RPT-204", status="draft"),
    ]
    db_session.add_all(reports)
    db_session.add(Product(category_id=toyota.id, name="Corolla"))
    db_session.add(Product(category_id=toyota.id, name="Celica", is_active=False))
    db_session.commit()
    return reports


@pytest.fixture
def sample_data_sources(db_session) -> List[DataSource]:
    waste = DataSource(
        name="waste_management_data",
        display_name="Waste Management Data",
        description="Collected waste records",
    )
    customers = DataSource(name="customer_records", display_name=None, description=None)
    db_session.add_all([waste, customers])
    db_session.flush()
    db_session.add_all(
        [
            DataField(data_source_id=waste.id, field_name="weight_kg", field_label="Weight (kg)", field_type="decimal", is_numeric=True),
            DataField(data_source_id=waste.id, field_name="waste_zone", field_label="Waste Zone", field_type="varchar"),
            DataField(data_source_id=customers.id, field_name="region", field_label=None, field_type=None),
            DataField(data_source_id=customers.id, field_name="waste_zone", field_label="Zone", field_type="varchar"),
        ]
    )
    db_session.commit()
    return [waste, customers]


@pytest.fixture
def full_configuration() -> ReportConfiguration:
    """A configuration that exercises every clause of the generated query"""
    return ReportConfiguration(
        data_source="waste_management_data",
        data_source_label="Waste Management Data",
        selected_tables=["waste_management_data"],
        selected_fields=["waste_zone", "weight_kg", "customer"],
        print_order_fields=["waste_zone", "customer"],
        summary_fields=["weight_kg"],
        sort_fields=["waste_zone", "customer"],
        sort_orders=["DESC"],
        filter_conditions=[
            FilterCondition(field="status", operator="equal to", value="active"),
            FilterCondition(field="region", operator="LIKE", value="North%"),
        ],
        group_by_fields=["waste_zone", "customer"],
        aggregate_filters=[FilterCondition(field="SUM(weight_kg)", operator="greater than", value="100")],
        join_query=RawSqlFragment("LEFT JOIN customer_records c ON c.id = customer_id"),
        joined_available_fields=["region", "segment"],
        joined_print_order_fields=["c.region"],
        joined_group_by_fields=["c.region"],
        joined_aggregate_filters=[FilterCondition(field="COUNT(*)", operator=">=", value="2")],
    )
