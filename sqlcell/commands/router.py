from __future__ import annotations

from functools import lru_cache
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError
import logging

from sqlcell.core.constants import CommandName
from sqlcell.core.errors import (
    CommandError,
    CommandFailedError,
    CommandNotFoundError,
    InvalidArgsError,
    SqlCellError,
)
from .handlers import ExecuteSqlArgs, GreetArgs, execute_sql, greet

logger = logging.getLogger(__name__)


class CommandSpec(BaseModel):
    """A command the host shell can invoke by name"""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., description="Unique command identifier")
    description: str = Field(..., description="Human-readable description")
    args_model: Type[BaseModel] = Field(..., description="Typed argument model")
    handler: Callable[..., Any] = Field(..., description="Function called with the validated args")

    @property
    def parameters(self) -> Dict[str, Any]:
        """JSON schema properties for command parameters"""
        schema = self.args_model.model_json_schema()
        return {
            "properties": schema.get("properties", {}),
            "required": schema.get("required", []),
        }

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


class CommandRouter:
    """
    Immutable name → command table.

    Built once at process start. Dispatch validates the raw argument dict
    against the command's pydantic model before calling the handler.
    """

    def __init__(self, specs: Iterable[CommandSpec]):
        table: Dict[str, CommandSpec] = {}
        for spec in specs:
            if spec.name in table:
                raise ValueError(f"Duplicate command name: {spec.name}")
            table[spec.name] = spec
        self._table: Mapping[str, CommandSpec] = MappingProxyType(table)

    @property
    def commands(self) -> List[CommandSpec]:
        return list(self._table.values())

    @property
    def names(self) -> List[str]:
        return list(self._table.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._table

    def describe(self) -> List[Dict[str, Any]]:
        return [spec.describe() for spec in self._table.values()]

    def dispatch(self, name: str, args: Dict[str, Any] | None = None) -> Any:
        """
        Invoke command ``name`` with ``args``

        Raises:
            CommandNotFoundError: When no command is registered under ``name``
            InvalidArgsError: When ``args`` do not fit the command's model
            CommandFailedError: When the handler rejects its input
        """
        spec = self._table.get(name)
        if spec is None:
            raise CommandNotFoundError(f"command {name} not found")

        try:
            parsed = spec.args_model.model_validate(args or {})
        except ValidationError as e:
            fields = ", ".join(
                ".".join(str(part) for part in err["loc"]) or "<root>"
                for err in e.errors()
            )
            raise InvalidArgsError(
                f"invalid args `{fields}` for command `{name}`") from e

        try:
            return spec.handler(**parsed.model_dump())
        except CommandError:
            raise
        except SqlCellError as e:
            logger.warning("Command %s failed: %s", name, e)
            raise CommandFailedError(str(e)) from e


BUILTIN_COMMANDS = (
    CommandSpec(
        name=CommandName.GREET.value,
        description="Return a greeting for the given name",
        args_model=GreetArgs,
        handler=greet,
    ),
    CommandSpec(
        name=CommandName.EXECUTE_SQL.value,
        description="Run a SQL cell against the demo dataset and return JSON text",
        args_model=ExecuteSqlArgs,
        handler=execute_sql,
    ),
)


@lru_cache()
def default_router() -> CommandRouter:
    return CommandRouter(BUILTIN_COMMANDS)
