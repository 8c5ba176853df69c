from .constants import EMPTY_QUERY_MESSAGE


class SqlCellError(Exception):
    """Base exception for the SQL cell backend"""
    pass


class EmptyQueryError(SqlCellError):
    """Raised when the query text is blank after trimming"""

    def __init__(self, message: str = EMPTY_QUERY_MESSAGE):
        super().__init__(message)


class CommandError(SqlCellError):
    """Base exception for command dispatch errors"""
    pass


class CommandNotFoundError(CommandError):
    """Raised when trying to invoke a command that is not registered"""
    pass


class InvalidArgsError(CommandError):
    """Raised when command arguments do not match the command signature"""
    pass


class CommandFailedError(CommandError):
    """Raised when a handler rejects its input; carries the handler's message"""
    pass


class BridgeError(SqlCellError):
    """Raised by the bridge client on transport or server errors"""
    pass


class CellNotFoundError(SqlCellError):
    """Raised when a notebook has no cell with the requested id"""
    pass
