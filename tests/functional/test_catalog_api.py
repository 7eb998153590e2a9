"""
API tests for categories, reports and report configurations.
"""

import pytest
from fastapi.testclient import TestClient


def save_payload(category="Trucks", report="Haul Summary", **configuration):
    base = {"dataSource": "waste_management_data", "printOrderFields": ["waste_zone"]}
    base.update(configuration)
    return {"categoryName": category, "reportName": report, "configuration": base}


class TestCategoryAPI:
    """Category endpoints"""

    def test_get_categories(self, client: TestClient, sample_reports):
        response = client.get("/api/v1/get-categories")
        assert response.status_code == 200

        body = response.json()
        assert body["success"] is True
        categories = body["data"]["categories"]
        assert [c["name"] for c in categories] == ["Toyota", "Nissan"]
        assert categories[0]["reportCount"] == 1
        assert categories[0]["productCount"] == 1
        assert isinstance(categories[0]["id"], str)

    def test_create_category(self, client: TestClient):
        response = client.post("/api/v1/create-category", json={"name": "Trucks", "description": "Haulage"})
        assert response.status_code == 200

        body = response.json()
        assert body["message"] == "Category created"
        assert body["data"]["name"] == "Trucks"

    def test_create_duplicate_category(self, client: TestClient, sample_categories):
        response = client.post("/api/v1/create-category", json={"name": "Toyota"})
        assert response.status_code == 409

        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Category 'Toyota' already exists"

    def test_create_category_with_blank_name(self, client: TestClient):
        response = client.post("/api/v1/create-category", json={"name": "   "})
        assert response.status_code == 422
        assert response.json()["success"] is False

    def test_update_category(self, client: TestClient, sample_categories):
        payload = {"id": sample_categories[1].id, "name": "Nissan Fleet", "description": ""}
        response = client.put("/api/v1/update-category", json=payload)
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Nissan Fleet"

    def test_update_missing_category(self, client: TestClient):
        response = client.put("/api/v1/update-category", json={"id": 99, "name": "Ghost"})
        assert response.status_code == 404


class TestReportAPI:
    """Report endpoints"""

    def test_create_report(self, client: TestClient, sample_categories):
        payload = {"categoryId": sample_categories[0].id, "name": "Inventory", "number": "", "description": "stock"}
        response = client.post("/api/v1/create-report", json=payload)
        assert response.status_code == 200

        report = response.json()["data"]
        assert report["number"].startswith("RPT-")
        assert report["status"] == "draft"
        assert "createdAt" in report

    def test_create_report_for_missing_category(self, client: TestClient):
        response = client.post("/api/v1/create-report", json={"categoryId": 5, "name": "Orphan"})
        assert response.status_code == 404

    def test_stats(self, client: TestClient, sample_reports):
        response = client.get("/api/v1/stats")
        assert response.json()["data"] == {"totalReports": 3, "totalCategories": 3}

    def test_delete_report(self, client: TestClient):
        report_id = client.post("/api/v1/save-report-configuration", json=save_payload()).json()["data"]["reportId"]

        response = client.delete(f"/api/v1/reports/{report_id}")
        assert response.status_code == 200
        assert response.json()["data"]["deletedConfigurations"] == 1

        assert client.get(f"/api/v1/report-configuration/{report_id}").status_code == 404

    def test_truncate_reports_and_categories(self, client: TestClient, sample_reports):
        assert client.delete("/api/v1/reports").json()["data"]["deletedReports"] == 3
        assert client.delete("/api/v1/categories").json()["data"]["deletedCategories"] == 3
        assert client.get("/api/v1/stats").json()["data"] == {"totalReports": 0, "totalCategories": 0}


class TestReportConfigurationAPI:
    """Save / load / update / render cycle"""

    def test_save_and_load_round_trip(self, client: TestClient):
        configuration = {
            "dataSource": "waste_management_data",
            "dataSourceLabel": "Waste Management Data",
            "selectedTables": ["waste_management_data"],
            "selectedFields": ["waste_zone", "weight_kg"],
            "printOrderFields": ["waste_zone"],
            "summaryFields": ["weight_kg"],
            "sortFields": ["waste_zone"],
            "sortOrders": ["DESC"],
            "filterConditions": [{"field": "waste_zone", "operator": "equal to", "value": "North"}],
            "groupByFields": ["waste_zone"],
            "aggregateFilters": [{"field": "SUM(weight_kg)", "operator": "greater than", "value": "10"}],
            "joinQuery": "LEFT JOIN customer_records c ON c.id = customer_id",
            "joinedAvailableFields": ["region"],
            "joinedPrintOrderFields": ["c.region"],
            "joinedGroupByFields": ["c.region"],
            "joinedAggregateFilters": [],
        }
        saved = client.post(
            "/api/v1/save-report-configuration",
            json={"categoryName": "Trucks", "reportName": "Haul Summary", "configuration": configuration},
        )
        assert saved.status_code == 200
        body = saved.json()
        assert body["message"] == "Report configuration saved successfully"
        report_id = body["data"]["reportId"]

        loaded = client.get(f"/api/v1/report-configuration/{report_id}")
        assert loaded.status_code == 200
        assert loaded.json()["data"]["configuration"] == configuration

    def test_save_creates_category(self, client: TestClient):
        client.post("/api/v1/save-report-configuration", json=save_payload(category="Brand New"))
        names = [c["name"] for c in client.get("/api/v1/get-categories").json()["data"]["categories"]]
        assert "Brand New" in names

    def test_save_with_blank_names(self, client: TestClient):
        response = client.post("/api/v1/save-report-configuration", json=save_payload(category="", report=""))
        assert response.status_code == 400
        assert response.json()["message"] == "Category name and report name are required."

    def test_update_configuration(self, client: TestClient):
        report_id = client.post("/api/v1/save-report-configuration", json=save_payload()).json()["data"]["reportId"]

        response = client.put(
            f"/api/v1/report-configuration/{report_id}",
            json={"configuration": {"dataSource": "customer_records", "printOrderFields": ["region"]}},
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Report configuration updated successfully"

        sql = client.get(f"/api/v1/report-configuration/{report_id}/sql").json()["data"]["sql"]
        assert sql == "SELECT region\nFROM customer_records;"

    def test_update_missing_report(self, client: TestClient):
        response = client.put("/api/v1/report-configuration/404", json={"configuration": {}})
        assert response.status_code == 404

    def test_load_missing_report(self, client: TestClient):
        response = client.get("/api/v1/report-configuration/999")
        assert response.status_code == 404
        assert response.json()["message"] == "Report not found"

    def test_preview_query(self, client: TestClient):
        configuration = {
            "dataSource": "T",
            "printOrderFields": ["a"],
            "filterConditions": [{"field": "a", "operator": "LIKE", "value": "x%"}],
            "sortFields": ["a"],
        }
        response = client.post("/api/v1/preview-query", json={"configuration": configuration})
        assert response.status_code == 200

        data = response.json()["data"]
        assert data["sql"] == "SELECT a\nFROM T\nWHERE a LIKE 'x%'\nORDER BY a ASC;"
        assert "formattedSql" in data

    def test_preview_query_accepts_nulls(self, client: TestClient):
        configuration = {
            "dataSource": "T",
            "printOrderFields": None,
            "joinQuery": None,
            "sortOrders": None,
            "sortFields": ["a"],
        }
        response = client.post("/api/v1/preview-query", json={"configuration": configuration})
        assert response.status_code == 200
        assert response.json()["data"]["sql"] == "SELECT *\nFROM T\nORDER BY a ASC;"

    @pytest.mark.parametrize("payload", [{"configuration": {"sortFields": "not-a-list"}}, {}])
    def test_preview_query_validation(self, client: TestClient, payload):
        response = client.post("/api/v1/preview-query", json=payload)
        assert response.status_code == 422
