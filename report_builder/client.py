# report_builder/client.py
"""HTTP client for the report builder API."""

import logging
from typing import Any, Dict, List, Optional, Union

import requests

from report_builder.builder.configuration import ReportConfiguration

logger = logging.getLogger(__name__)

ConfigurationInput = Union[ReportConfiguration, Dict[str, Any]]


class ReportBuilderAPIError(Exception):
    """Raised for non-2xx responses, ``success: false`` envelopes and transport failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ReportBuilderClient:
    """Thin wrapper over the ``/api`` routes. The base URL is always passed in."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # ===== SCHEMA =====

    def fetch_database_tables(self) -> List[Dict[str, str]]:
        return self._request("GET", "/api/v1/database-tables")["tables"]

    def fetch_table_fields(self, table_name: str) -> List[Dict[str, str]]:
        """Columns of one table; an unknown table or an unreachable server gives []."""
        try:
            return self._request("GET", f"/api/v1/database-tables/{table_name}/fields")["fields"]
        except ReportBuilderAPIError as e:
            if e.status_code is not None and e.status_code != 404:
                raise
            logger.warning("Could not fetch fields for table %s: %s", table_name, e.message)
            return []

    def fetch_joined_fields(self, join_query: str) -> Dict[str, List[str]]:
        return self._request("POST", "/api/v1/joined-fields", json={"joinQuery": join_query})

    # ===== CATALOG =====

    def fetch_report_builder_data(self) -> Dict[str, Any]:
        return self._request("GET", "/api/report-builder/initial")

    def fetch_categories(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/v1/get-categories")["categories"]

    def create_category(self, name: str, description: str = "") -> Dict[str, Any]:
        return self._request("POST", "/api/v1/create-category", json={"name": name, "description": description})

    def update_category(self, category_id: int, name: str, description: str = "") -> Dict[str, Any]:
        payload = {"id": category_id, "name": name, "description": description}
        return self._request("PUT", "/api/v1/update-category", json=payload)

    def create_report(self, category_id: int, name: str, number: str = "", description: str = "") -> Dict[str, Any]:
        payload = {"categoryId": category_id, "name": name, "number": number, "description": description}
        return self._request("POST", "/api/v1/create-report", json=payload)

    # ===== REPORT CONFIGURATIONS =====

    def save_report_configuration(
        self, category_name: str, report_name: str, configuration: ConfigurationInput
    ) -> Dict[str, Any]:
        payload = {
            "categoryName": category_name,
            "reportName": report_name,
            "configuration": _configuration_payload(configuration),
        }
        return self._request("POST", "/api/v1/save-report-configuration", json=payload)

    def get_report_configuration(self, report_id: int) -> ReportConfiguration:
        data = self._request("GET", f"/api/v1/report-configuration/{report_id}")
        return ReportConfiguration.model_validate(data["configuration"])

    def update_report_configuration(self, report_id: int, configuration: ConfigurationInput) -> Dict[str, Any]:
        payload = {"configuration": _configuration_payload(configuration)}
        return self._request("PUT", f"/api/v1/report-configuration/{report_id}", json=payload)

    def preview_query(self, configuration: ConfigurationInput) -> str:
        payload = {"configuration": _configuration_payload(configuration)}
        return self._request("POST", "/api/v1/preview-query", json=payload)["sql"]

    # ===== TRANSPORT =====

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ReportBuilderAPIError(f"{method} {url} failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok or not isinstance(body, dict) or body.get("success") is False:
            message = body.get("message") if isinstance(body, dict) else None
            raise ReportBuilderAPIError(message or f"{method} {url} returned {response.status_code}", response.status_code)

        return body.get("data")


def _configuration_payload(configuration: ConfigurationInput) -> Dict[str, Any]:
    if isinstance(configuration, ReportConfiguration):
        return configuration.model_dump(by_alias=True)
    return dict(configuration)
