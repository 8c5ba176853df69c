from sqlcell.commands.router import CommandRouter, default_router


def get_command_router() -> CommandRouter:
    return default_router()
