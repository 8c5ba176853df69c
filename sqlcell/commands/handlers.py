from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field
import logging

from sqlcell.core.constants import GREETING_TEMPLATE
from sqlcell.query.classifier import run_query

logger = logging.getLogger(__name__)


def _require_utf8(value: str) -> str:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValueError("string contains lone surrogate code points") from e
    return value


# Text the bridge can echo back; lone surrogates cannot be encoded on the way out
BridgeText = Annotated[str, AfterValidator(_require_utf8)]


class GreetArgs(BaseModel):
    name: BridgeText = Field(..., description="Name to greet")


class ExecuteSqlArgs(BaseModel):
    sql: BridgeText = Field(..., description="SQL text typed into a cell")


def greet(name: str) -> str:
    return GREETING_TEMPLATE.format(name=name)


def execute_sql(sql: str) -> str:
    """
    Classify ``sql`` and return the canned result as JSON text.

    Raises:
        EmptyQueryError: When ``sql`` is blank after trimming
    """
    logger.info("Executing SQL: %s", sql)
    return run_query(sql).to_json()
