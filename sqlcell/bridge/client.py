from __future__ import annotations

import time
from enum import Enum
from typing import Any, Dict, List

import httpx
from pydantic import ValidationError
from tenacity import RetryCallState, retry, wait_exponential, retry_if_exception_type
import logging

from sqlcell.api.schemas import CommandInfo
from sqlcell.core.constants import AppSettings, CommandName
from sqlcell.core.errors import (
    BridgeError,
    CommandFailedError,
    CommandNotFoundError,
    InvalidArgsError,
    SqlCellError,
)
from .notebook import Cell, CellResult, CellStatus

logger = logging.getLogger(__name__)


class Endpoint(Enum):
    """Centralized API endpoint paths"""

    COMMANDS = "/commands"
    INVOKE = "/invoke"


def _stop_after_max_retries(retry_state: RetryCallState) -> bool:
    """Stop once the calling client's ``max_retries`` attempts are used up"""
    client = retry_state.args[0]
    return retry_state.attempt_number >= client.max_retries


class BridgeClient:
    """
    Client side of the command bridge, used by the SQL cell UI.

    Features:
    - Lazy loading of the command list with caching
    - Retry logic on connection failures
    - Server errors mapped back onto the command exceptions
    - Cell execution with status and timing
    - Context manager support
    """

    def __init__(
        self,
        base_url: str = AppSettings.BRIDGE_URL,
        api_version: str = AppSettings.API_VERSION,
        timeout: float = 15.0,
        max_retries: int = 3
    ):
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version.strip("/")
        self.timeout = httpx.Timeout(timeout)
        self.max_retries = max_retries

        self._http_client = httpx.Client(
            base_url=f"{self.base_url}/{self.api_version}",
            timeout=self.timeout,
            follow_redirects=True
        )

        # Lazy loading
        self._commands: List[CommandInfo] | None = None
        self._command_map: Dict[str, CommandInfo] | None = None

    @property
    def commands(self) -> List[CommandInfo]:
        """Lazily loaded and cached commands list"""
        if self._commands is None:
            self._load_commands()
        return self._commands  # type: ignore[return-value]

    @property
    def command_map(self) -> Dict[str, CommandInfo]:
        """Name → CommandInfo lookup dictionary"""
        if self._command_map is None:
            self._command_map = {cmd.name: cmd for cmd in self.commands}
        return self._command_map

    @retry(
        stop=_stop_after_max_retries,
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.ConnectError, httpx.ReadTimeout)),
        reraise=True
    )
    def _load_commands(self) -> None:
        """Fetch available commands from the backend"""
        try:
            response = self._http_client.get(str(Endpoint.COMMANDS.value))
            response.raise_for_status()

            raw_commands = response.json()
            if not isinstance(raw_commands, list):
                raise ValueError("Expected list of commands from backend")

            self._commands = [CommandInfo.model_validate(
                cmd) for cmd in raw_commands]
            # Invalidate map cache
            self._command_map = None

        except httpx.HTTPStatusError as e:
            raise BridgeError(
                f"Failed to fetch commands: {e.response.status_code}") from e
        except (ValidationError, ValueError) as e:
            raise BridgeError(
                "Invalid command schema received from backend") from e

    @retry(
        stop=_stop_after_max_retries,
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.ConnectError, httpx.ReadTimeout)),
        reraise=True
    )
    def _post_invoke(self, payload: Dict[str, Any]) -> httpx.Response:
        return self._http_client.post(str(Endpoint.INVOKE.value), json=payload)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict):
            message = body.get("error") or body.get("detail")
            if message:
                return str(message)
        return str(body)

    def invoke(
        self,
        command_name: str,
        args: Dict[str, Any] | None = None
    ) -> Any:
        """
        Invoke a command on the backend and return its result

        Raises:
            CommandNotFoundError: When command doesn't exist
            InvalidArgsError: When the backend rejects the arguments
            CommandFailedError: When the command rejects its input
            BridgeError: On other server errors or a malformed reply
        """
        if command_name not in self.command_map:
            raise CommandNotFoundError(f"command {command_name} not found")

        payload = {
            "command": command_name,
            "args": args or {}
        }

        response = self._post_invoke(payload)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            code = e.response.status_code
            message = self._error_message(e.response)
            if code == 400:
                raise CommandFailedError(message) from e
            if code == 404:
                raise CommandNotFoundError(message) from e
            if code == 422:
                raise InvalidArgsError(message) from e
            raise BridgeError(f"Command invocation failed: {code}") from e

        try:
            return response.json()["result"]
        except (ValueError, KeyError, TypeError) as e:
            raise BridgeError("Malformed reply from backend") from e

    def greet(self, name: str) -> str:
        return self.invoke(CommandName.GREET.value, {"name": name})

    def execute_sql(self, sql: str) -> str:
        """Raw JSON text, exactly as the backend produced it"""
        return self.invoke(CommandName.EXECUTE_SQL.value, {"sql": sql})

    def run_cell(self, cell: Cell) -> CellResult:
        """Execute a cell; blank cells are left idle and never sent."""
        if not cell.sql.strip():
            return CellResult(cell_id=cell.id)

        started = time.perf_counter()
        try:
            result = self.execute_sql(cell.sql)
        except (SqlCellError, httpx.HTTPError) as exc:
            elapsed = (time.perf_counter() - started) * 1000
            logger.warning("Cell %s failed: %s", cell.id, exc)
            return CellResult(
                cell_id=cell.id,
                status=CellStatus.ERROR,
                result=f"Error: {exc}",
                execution_time_ms=elapsed,
            )

        elapsed = (time.perf_counter() - started) * 1000
        return CellResult(
            cell_id=cell.id,
            status=CellStatus.SUCCESS,
            result=result,
            execution_time_ms=elapsed,
        )

    def close(self) -> None:
        """Close underlying HTTP client"""
        self._http_client.close()

    def __enter__(self) -> 'BridgeClient':
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
