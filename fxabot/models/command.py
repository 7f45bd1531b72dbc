"""Bot command model."""

from enum import Enum


class Command(str, Enum):
    """Outcome of reading a comment addressed to the bot."""

    PING = "ping"
    DEPLOY = "deploy"
    UNRECOGNIZED = "unrecognized"  # authorized user, unknown command
    IGNORE = "ignore"
