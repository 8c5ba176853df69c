from typing import Any, Dict

from pydantic import BaseModel, Field


class InvokeRequest(BaseModel):
    command: str = Field(..., min_length=1, description="Registered command name")
    args: Dict[str, Any] = Field(default_factory=dict,
                                 description="Named command arguments")


class InvokeResponse(BaseModel):
    ok: bool = True
    result: Any = None
    error: str | None = None


class CommandInfo(BaseModel):
    name: str
    description: str
    parameters: Dict[str, Any] = Field(default_factory=dict)
