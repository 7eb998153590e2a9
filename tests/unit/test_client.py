"""
Unit tests for the HTTP API client, using a mocked requests session.
"""

import pytest
import requests
from unittest.mock import Mock

from report_builder.builder import FilterCondition, ReportConfiguration
from report_builder.client import ReportBuilderAPIError, ReportBuilderClient


def make_response(status_code=200, body=None):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if body is None:
        response.json.side_effect = ValueError("no JSON")
    else:
        response.json.return_value = body
    return response


def envelope(data, success=True, message=None):
    return {"success": success, "message": message, "data": data}


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def api(session):
    return ReportBuilderClient("http://reports.internal:4000/", session=session, timeout=5)


class TestRequests:
    def test_base_url_is_used_as_given(self, api, session):
        session.request.return_value = make_response(body=envelope({"tables": []}))

        api.fetch_database_tables()

        session.request.assert_called_once_with("GET", "http://reports.internal:4000/api/v1/database-tables", timeout=5)

    def test_unwraps_envelope(self, api, session):
        categories = [{"id": "1", "name": "Toyota"}]
        session.request.return_value = make_response(body=envelope({"categories": categories}))
        assert api.fetch_categories() == categories

    def test_save_sends_camel_case_configuration(self, api, session):
        session.request.return_value = make_response(body=envelope({"reportId": "7"}))
        configuration = ReportConfiguration(
            data_source="t",
            print_order_fields=["a"],
            filter_conditions=[FilterCondition(field="a", operator="equal to", value="1")],
        )

        assert api.save_report_configuration("Toyota", "Weekly", configuration) == {"reportId": "7"}

        payload = session.request.call_args.kwargs["json"]
        assert payload["categoryName"] == "Toyota"
        assert payload["configuration"]["printOrderFields"] == ["a"]
        assert payload["configuration"]["joinQuery"] == ""
        assert payload["configuration"]["filterConditions"] == [{"field": "a", "operator": "equal to", "value": "1"}]

    def test_get_report_configuration_returns_model(self, api, session):
        stored = ReportConfiguration(data_source="t", sort_fields=["x"]).model_dump(by_alias=True)
        session.request.return_value = make_response(body=envelope({"configuration": stored}))

        configuration = api.get_report_configuration(3)

        assert isinstance(configuration, ReportConfiguration)
        assert configuration.sort_fields == ["x"]

    def test_preview_query_returns_sql(self, api, session):
        session.request.return_value = make_response(body=envelope({"sql": "SELECT *\nFROM t;", "formattedSql": ""}))
        assert api.preview_query({"dataSource": "t"}) == "SELECT *\nFROM t;"


class TestErrors:
    def test_http_error_raises_with_message(self, api, session):
        session.request.return_value = make_response(409, {"success": False, "message": "Category 'x' already exists"})

        with pytest.raises(ReportBuilderAPIError) as exc_info:
            api.create_category("x")

        assert exc_info.value.status_code == 409
        assert exc_info.value.message == "Category 'x' already exists"

    def test_unsuccessful_envelope_raises(self, api, session):
        session.request.return_value = make_response(200, envelope(None, success=False, message="nope"))
        with pytest.raises(ReportBuilderAPIError, match="nope"):
            api.fetch_report_builder_data()

    def test_non_json_error_body(self, api, session):
        session.request.return_value = make_response(502)
        with pytest.raises(ReportBuilderAPIError, match="returned 502"):
            api.fetch_categories()

    def test_transport_error_raises(self, api, session):
        session.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(ReportBuilderAPIError) as exc_info:
            api.fetch_database_tables()
        assert exc_info.value.status_code is None


class TestFetchTableFields:
    def test_returns_fields(self, api, session):
        fields = [{"name": "id", "label": "id", "type": "INTEGER"}]
        session.request.return_value = make_response(body=envelope({"fields": fields}))
        assert api.fetch_table_fields("customers") == fields

    def test_not_found_gives_empty_list(self, api, session):
        session.request.return_value = make_response(404, {"success": False, "message": "Table not found or has no columns."})
        assert api.fetch_table_fields("missing") == []

    def test_transport_error_gives_empty_list(self, api, session):
        session.request.side_effect = requests.Timeout("slow")
        assert api.fetch_table_fields("customers") == []

    def test_server_error_still_raises(self, api, session):
        session.request.return_value = make_response(500, {"success": False, "message": "Internal Server Error"})
        with pytest.raises(ReportBuilderAPIError):
            api.fetch_table_fields("customers")


class TestFetchJoinedFields:
    def test_posts_join_query(self, api, session):
        data = {"tables": ["orders"], "fields": ["orders.id", "orders.total"]}
        session.request.return_value = make_response(body=envelope(data))

        assert api.fetch_joined_fields("JOIN orders o ON o.customer_id = c.id") == data
        session.request.assert_called_once_with(
            "POST",
            "http://reports.internal:4000/api/v1/joined-fields",
            json={"joinQuery": "JOIN orders o ON o.customer_id = c.id"},
            timeout=5,
        )

    def test_error_raises(self, api, session):
        session.request.return_value = make_response(500, {"success": False, "message": "Internal Server Error"})
        with pytest.raises(ReportBuilderAPIError):
            api.fetch_joined_fields("JOIN orders")
