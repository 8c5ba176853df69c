from enum import Enum


class CommandName(str, Enum):
    """Commands exposed to the UI over the bridge"""

    GREET = "greet"
    EXECUTE_SQL = "execute_sql"


class AppSettings:
    """Central place for all application-level configuration"""

    APP_NAME: str = "sqlcell"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    BRIDGE_HOST: str = "127.0.0.1"
    BRIDGE_PORT: int = 1420
    BRIDGE_URL = "http://127.0.0.1:1420"
    API_VERSION = "/api/v1"


GREETING_TEMPLATE = "Hello, {name}! You've been greeted from Python!"
EMPTY_QUERY_MESSAGE = "Empty SQL query"
