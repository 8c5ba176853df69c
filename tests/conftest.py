import pytest
from unittest.mock import Mock
from fastapi.testclient import TestClient
from httpx import Response
from sqlcell.api.schemas import CommandInfo
from sqlcell.commands.router import default_router


@pytest.fixture
def fake_bridge_url():
    return "http://fake-bridge:9999"


@pytest.fixture
def api_client():
    from sqlcell.main import app
    return TestClient(app)


@pytest.fixture
def sample_commands():
    return [CommandInfo(**info) for info in default_router().describe()]


@pytest.fixture
def invoke_response():
    """Response returned by the mocked POST /invoke; tweak per test"""
    response = Mock(spec=Response)
    response.raise_for_status.return_value = None
    response.json.return_value = {"ok": True, "result": "mocked_result", "error": None}
    return response


@pytest.fixture
def mock_httpx_client(mocker, sample_commands, invoke_response):
    """Mock httpx.Client completely"""
    mock_client = mocker.Mock()

    # Mock GET /commands
    mock_get_response = Mock(spec=Response)
    mock_get_response.raise_for_status.return_value = None
    mock_get_response.json.return_value = [
        cmd.model_dump() for cmd in sample_commands]

    mock_client.get.return_value = mock_get_response

    # Mock POST /invoke
    mock_client.post.return_value = invoke_response

    mocker.patch("httpx.Client", return_value=mock_client)
    return mock_client
