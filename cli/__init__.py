from cli.generate import generate_command
from cli.usage import usage_command

# Export all commands for use in the app
__all__ = [
    "generate_command",
    "usage_command",
]
