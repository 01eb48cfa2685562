from pathlib import Path

from core.config import PortalSettings
from core.models import ChatIntentResult, QueryExecutionResult


def test_chat_intent_missing_fields_are_empty():
    result = ChatIntentResult.from_payload({})
    assert result.communication == ""
    assert result.sql_query is None


def test_chat_intent_blank_sql_is_none():
    result = ChatIntentResult.from_payload({"communication": "hi", "sql_query": "  "})
    assert result.communication == "hi"
    assert result.sql_query is None


def test_chat_intent_null_fields():
    result = ChatIntentResult.from_payload({"communication": None, "sql_query": None})
    assert result == ChatIntentResult()


def test_query_result_columns_fall_back_to_first_row():
    result = QueryExecutionResult.from_payload({"data": [{"b": 1, "a": 2}]})
    assert result.columns == ["b", "a"]
    assert result.row_count == 1
    assert result.execution_time is None


def test_query_result_without_data():
    result = QueryExecutionResult.from_payload({"columns": ["a"]})
    assert result.has_rows is False
    assert result.row_count == 0


def test_query_result_reported_count_wins():
    result = QueryExecutionResult.from_payload(
        {"data": [{"a": 1}], "columns": ["a"], "rows": 5000, "execution_time": 1.5}
    )
    assert result.row_count == 5000
    assert result.execution_time == 1.5


def test_settings_defaults():
    settings = PortalSettings.from_env({})
    assert settings.base_url == "https://your-app.koyeb.app"
    assert settings.access_token == ""
    assert settings.default_model == "gpt-4.1"
    assert settings.fallback_model == "gpt-5"
    assert settings.max_failures == 3
    assert settings.request_timeout is None
    assert settings.save_large_results is True
    assert settings.data_dir is None


def test_settings_from_env():
    settings = PortalSettings.from_env(
        {
            "APP_URL": "https://portal.example.com/",
            "USER_ACCESS_TOKEN": "abc",
            "MAX_FAILURES": "5",
            "REQUEST_TIMEOUT_SECONDS": "30",
            "SAVE_LARGE_RESULTS": "false",
            "DATA_DIR": "/var/data",
            "PORT": "9000",
        }
    )
    assert settings.base_url == "https://portal.example.com"
    assert settings.access_token == "abc"
    assert settings.max_failures == 5
    assert settings.request_timeout == 30.0
    assert settings.save_large_results is False
    assert settings.data_dir == Path("/var/data")
    assert settings.port == 9000


def test_koyeb_url_takes_precedence():
    settings = PortalSettings.from_env({"KOYEB_APP_URL": "https://a.koyeb.app", "APP_URL": "https://b"})
    assert settings.base_url == "https://a.koyeb.app"
