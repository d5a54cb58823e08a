"""CLI commands, with config and storage redirected to a temp dir."""

import json

import httpx
import pytest
from click.testing import CliRunner

from crudkit.api import AsyncAPI
from crudkit.cli import main as cli_main
from crudkit.storage import FileStorage
from crudkit.transport.http import HttpTransport


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    monkeypatch.setattr(cli_main, "CONFIG_FILE", tmp_path / "config.json")
    monkeypatch.setattr(cli_main, "STORAGE_FILE", tmp_path / "storage.json")
    for name in ("CRUDKIT_BASE_URL", "CRUDKIT_SESSION_KEY", "CRUDKIT_RELOAD_ON_INVALID_SESSION"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture
def runner():
    return CliRunner()


class _Seen(list):
    responses: dict


@pytest.fixture
def served(monkeypatch):
    """Route CLI requests to a mock handler; returns the requests seen."""
    seen = _Seen()
    responses = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        status, body = responses.get(request.method, (200, {"ok": True}))
        return httpx.Response(status, content=json.dumps(body).encode())

    def get_client():
        transport = HttpTransport(httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        return AsyncAPI(config=cli_main._client_config(), storage=FileStorage(cli_main.STORAGE_FILE),
                        transport=transport)

    monkeypatch.setattr(cli_main, "_get_client", get_client)
    seen.responses = responses
    return seen


def test_config_set_and_show(runner):
    result = runner.invoke(cli_main.main, ["config", "set", "base_url", "http://api.local"])
    assert result.exit_code == 0
    result = runner.invoke(cli_main.main, ["config", "set", "reload_on_invalid_session", "yes"])
    assert result.exit_code == 0

    cfg = json.loads(cli_main.CONFIG_FILE.read_text())
    assert cfg == {"base_url": "http://api.local", "reload_on_invalid_session": True}

    result = runner.invoke(cli_main.main, ["config", "show"])
    assert result.exit_code == 0
    assert "http://api.local" in result.output
    assert '"session"' in result.output


def test_env_overrides_config_file(runner, monkeypatch):
    runner.invoke(cli_main.main, ["config", "set", "base_url", "http://file.local"])
    monkeypatch.setenv("CRUDKIT_BASE_URL", "http://env.local")
    assert cli_main._client_config().base_url == "http://env.local"


def test_config_set_rejects_unknown_keys(runner):
    result = runner.invoke(cli_main.main, ["config", "set", "colour", "blue"])
    assert result.exit_code != 0


def test_config_set_rejects_bad_values(runner):
    result = runner.invoke(cli_main.main, ["config", "set", "reload_on_invalid_session", "maybe"])
    assert result.exit_code != 0
    assert not cli_main.CONFIG_FILE.exists()


def test_session_commands(runner):
    result = runner.invoke(cli_main.main, ["session", "show"])
    assert "No session stored" in result.output

    result = runner.invoke(cli_main.main, ["session", "set-token", "abc"])
    assert result.exit_code == 0

    result = runner.invoke(cli_main.main, ["session", "show"])
    assert json.loads(result.output) == {"token": "abc"}

    result = runner.invoke(cli_main.main, ["session", "clear"])
    assert result.exit_code == 0
    assert "No session stored" in runner.invoke(cli_main.main, ["session", "show"]).output


class TestRequests:
    @pytest.fixture(autouse=True)
    def base_url(self, runner):
        runner.invoke(cli_main.main, ["config", "set", "base_url", "http://api.local"])

    def test_get_with_query_and_token(self, runner, served):
        runner.invoke(cli_main.main, ["session", "set-token", "abc"])
        result = runner.invoke(cli_main.main, ["get", "/things", "-q", "page=2", "-q", "active=yes"])
        assert result.exit_code == 0
        assert json.loads(result.output) == {"ok": True}
        assert str(served[0].url) == "http://api.local/api/things?page=2&active=yes"
        assert served[0].headers["authorization"] == "abc"

    def test_post_and_put_send_json(self, runner, served):
        assert runner.invoke(cli_main.main, ["post", "/things", "-d", '{"name": "x"}']).exit_code == 0
        assert runner.invoke(cli_main.main, ["put", "/things/1", "--data", '{"name": "y"}']).exit_code == 0
        assert [r.method for r in served] == ["POST", "PUT"]
        assert json.loads(served[0].content) == {"name": "x"}
        assert json.loads(served[1].content) == {"name": "y"}

    def test_delete_with_empty_response(self, runner, served):
        served.responses["DELETE"] = (200, None)
        result = runner.invoke(cli_main.main, ["delete", "/things/1"])
        assert result.exit_code == 0
        assert "empty response" in result.output

    def test_api_error_exits_non_zero(self, runner, served):
        served.responses["GET"] = (404, {"statusCode": 404, "message": "Nope"})
        result = runner.invoke(cli_main.main, ["get", "/things/1"])
        assert result.exit_code == 1
        assert "HTTP 404: Nope" in result.output

    def test_bad_arguments(self, runner, served):
        assert runner.invoke(cli_main.main, ["get", "/things", "-q", "novalue"]).exit_code != 0
        assert runner.invoke(cli_main.main, ["post", "/things", "-d", "{bad"]).exit_code != 0
        assert served == []


def test_missing_base_url(runner):
    result = runner.invoke(cli_main.main, ["get", "/things"])
    assert result.exit_code == 1
    assert "URL could not be determined" in result.output
