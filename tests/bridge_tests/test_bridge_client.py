import httpx
import pytest
from sqlcell.bridge.client import BridgeClient, Cell, CellStatus
from sqlcell.core.errors import (
    BridgeError,
    CommandFailedError,
    CommandNotFoundError,
    InvalidArgsError,
)


def _fail_with(response, status_code, body):
    response.status_code = status_code
    response.json.return_value = body
    response.raise_for_status.side_effect = httpx.HTTPStatusError(
        f"HTTP {status_code}", request=None, response=response)


def test_bridge_client_lazy_loading(fake_bridge_url, mock_httpx_client):
    client = BridgeClient(base_url=fake_bridge_url)

    # Before access → no request
    assert client._commands is None

    _ = client.commands

    assert [cmd.name for cmd in client.commands] == ["greet", "execute_sql"]
    mock_httpx_client.get.assert_called_once()


def test_commands_are_cached(fake_bridge_url, mock_httpx_client):
    client = BridgeClient(base_url=fake_bridge_url)

    _ = client.commands
    _ = client.commands

    assert mock_httpx_client.get.call_count == 1


def test_invalid_command_list_raises(fake_bridge_url, mock_httpx_client):
    mock_httpx_client.get.return_value.json.return_value = {"not": "a list"}
    client = BridgeClient(base_url=fake_bridge_url)

    with pytest.raises(BridgeError):
        _ = client.commands


def test_execute_sql_posts_invoke_payload(fake_bridge_url, mock_httpx_client):
    client = BridgeClient(base_url=fake_bridge_url)

    result = client.execute_sql("SELECT * FROM users")

    assert result == "mocked_result"
    call_args = mock_httpx_client.post.call_args
    assert call_args[0][0] == "/invoke"
    assert call_args[1]["json"] == {
        "command": "execute_sql",
        "args": {"sql": "SELECT * FROM users"}
    }


def test_greet_posts_name(fake_bridge_url, mock_httpx_client):
    client = BridgeClient(base_url=fake_bridge_url)

    client.greet("")

    assert mock_httpx_client.post.call_args[1]["json"] == {
        "command": "greet",
        "args": {"name": ""}
    }


def test_invoke_unknown_command_raises_locally(fake_bridge_url, mock_httpx_client):
    client = BridgeClient(base_url=fake_bridge_url)

    with pytest.raises(CommandNotFoundError) as exc:
        client.invoke("magic_nonexistent")

    assert "magic_nonexistent" in str(exc.value)
    mock_httpx_client.post.assert_not_called()


def test_command_failure_maps_to_exception(fake_bridge_url, mock_httpx_client, invoke_response):
    _fail_with(invoke_response, 400, {"ok": False, "result": None, "error": "Empty SQL query"})
    client = BridgeClient(base_url=fake_bridge_url)

    with pytest.raises(CommandFailedError) as exc:
        client.execute_sql("   ")

    assert str(exc.value) == "Empty SQL query"


def test_invalid_args_maps_to_exception(fake_bridge_url, mock_httpx_client, invoke_response):
    _fail_with(invoke_response, 422, {"ok": False, "result": None,
                                      "error": "invalid args `sql` for command `execute_sql`"})
    client = BridgeClient(base_url=fake_bridge_url)

    with pytest.raises(InvalidArgsError):
        client.invoke("execute_sql")


def test_server_error_maps_to_bridge_error(fake_bridge_url, mock_httpx_client, invoke_response):
    _fail_with(invoke_response, 500, {"ok": False, "result": None, "error": "Internal server error"})
    client = BridgeClient(base_url=fake_bridge_url)

    with pytest.raises(BridgeError) as exc:
        client.execute_sql("SELECT 1")

    assert "500" in str(exc.value)


def test_run_cell_success(fake_bridge_url, mock_httpx_client, invoke_response):
    invoke_response.json.return_value = {
        "ok": True, "result": '[{"user_count":5}]', "error": None}
    client = BridgeClient(base_url=fake_bridge_url)

    outcome = client.run_cell(Cell(id="2", sql="SELECT COUNT(*) FROM users"))

    assert outcome.cell_id == "2"
    assert outcome.status is CellStatus.SUCCESS
    assert outcome.result == '[{"user_count":5}]'
    assert outcome.execution_time_ms is not None
    assert outcome.execution_time_ms >= 0


def test_run_cell_error_prefixes_message(fake_bridge_url, mock_httpx_client, invoke_response):
    _fail_with(invoke_response, 400, {"ok": False, "result": None, "error": "Empty SQL query"})
    client = BridgeClient(base_url=fake_bridge_url)

    outcome = client.run_cell(Cell(id="1", sql="-- nothing"))

    assert outcome.status is CellStatus.ERROR
    assert outcome.result == "Error: Empty SQL query"
    assert outcome.execution_time_ms is not None


def test_run_cell_blank_is_not_sent(fake_bridge_url, mock_httpx_client):
    client = BridgeClient(base_url=fake_bridge_url)

    outcome = client.run_cell(Cell(id="3", sql="  \n "))

    assert outcome.status is CellStatus.IDLE
    assert outcome.result == ""
    assert outcome.execution_time_ms is None
    mock_httpx_client.post.assert_not_called()


def test_context_manager_closes_http_client(fake_bridge_url, mock_httpx_client):
    with BridgeClient(base_url=fake_bridge_url):
        pass

    mock_httpx_client.close.assert_called_once()


def test_client_built_from_settings(mock_httpx_client):
    from sqlcell.core.config import Settings

    settings = Settings(BRIDGE_URL="http://desktop-shell:1420/", API_VERSION="/api/v1")
    client = BridgeClient(**settings.bridge_config)

    assert client.base_url == "http://desktop-shell:1420"
    assert httpx.Client.call_args[1]["base_url"] == "http://desktop-shell:1420/api/v1"


def test_connect_errors_retried_up_to_max_retries(fake_bridge_url, mock_httpx_client, mocker):
    mocker.patch("time.sleep")
    mock_httpx_client.post.side_effect = httpx.ConnectError("connection refused")
    client = BridgeClient(base_url=fake_bridge_url, max_retries=2)

    with pytest.raises(httpx.ConnectError):
        client.execute_sql("SELECT 1")

    assert mock_httpx_client.post.call_count == 2


def test_run_cell_connect_error_marks_cell_failed(fake_bridge_url, mock_httpx_client, mocker):
    mocker.patch("time.sleep")
    mock_httpx_client.post.side_effect = httpx.ConnectError("connection refused")
    client = BridgeClient(base_url=fake_bridge_url, max_retries=1)

    outcome = client.run_cell(Cell(id="1", sql="SELECT 1"))

    assert outcome.status is CellStatus.ERROR
    assert outcome.result == "Error: connection refused"
    assert mock_httpx_client.post.call_count == 1


@pytest.mark.parametrize("body", [{"ok": True}, ["not", "an", "object"]])
def test_reply_without_result_raises_bridge_error(fake_bridge_url, mock_httpx_client,
                                                  invoke_response, body):
    invoke_response.json.return_value = body
    client = BridgeClient(base_url=fake_bridge_url)

    with pytest.raises(BridgeError):
        client.execute_sql("SELECT 1")


def test_reply_not_json_marks_cell_failed(fake_bridge_url, mock_httpx_client, invoke_response):
    invoke_response.json.side_effect = ValueError("Expecting value")
    client = BridgeClient(base_url=fake_bridge_url)

    outcome = client.run_cell(Cell(id="1", sql="SELECT 1"))

    assert outcome.status is CellStatus.ERROR
    assert outcome.result == "Error: Malformed reply from backend"
