"""
Command interpreter.

Finds the line of a comment that addresses the bot, checks that the
commenter is trusted, and maps the word after the mention to a Command.
"""

from typing import Optional, Sequence

from fxabot.models.command import Command
from fxabot.models.event import CommentAction, CommentEvent
from fxabot.models.job import Job
from fxabot.utils.logging import get_logger

logger = get_logger(__name__)

REPLIES = {
    Command.PING: "@{login} pong :ping_pong:",
    Command.DEPLOY: "@{login} I'd love to... but I don't have that chip installed yet. :sob:",
    Command.UNRECOGNIZED: "@{login} I'm sorry, I didn't understand you. Bzzt. :zap:",
}


def parse_command(username: str, authorized: Sequence[str], event: CommentEvent) -> Command:
    """
    Work out what, if anything, a comment asks the bot to do.

    Only newly created comments are considered. Mentions from senders not
    in `authorized` are dropped without a reply.

    Args:
        username: The bot's GitHub login; empty disables commands
        authorized: Logins allowed to command the bot
        event: Decoded issue_comment event

    Returns:
        The command, or Command.IGNORE
    """
    if not username or event.action != CommentAction.CREATED:
        return Command.IGNORE

    line = find_mention(event.comment.body, username)
    if line is None:
        return Command.IGNORE

    logger.debug(f"Someone mentioned me: {line!r}")
    if event.sender.login not in authorized:
        logger.debug(f"Not someone I trust: {event.sender.login!r}")
        return Command.IGNORE

    return parse_line(line)


def find_mention(body: str, username: str) -> Optional[str]:
    """Return the first line of `body` that starts with ``@<username> ``."""
    min_len = 1 + len(username) + 1  # '@username '
    for line in body.split("\n"):
        if (
            len(line) > min_len
            and line.startswith("@")
            and line[1:].startswith(username)
            and line[min_len - 1] == " "
        ):
            return line
    return None


def parse_line(line: str) -> Command:
    words = line.split(" ")
    # words[0] is the mention itself
    word = words[1] if len(words) > 1 else None
    if word == "ping":
        return Command.PING
    if word == "deploy":
        return Command.DEPLOY
    return Command.UNRECOGNIZED


def build_reply(command: Command, event: CommentEvent) -> Optional[str]:
    """Reply text for `command`, addressed to whoever sent the event."""
    template = REPLIES.get(command)
    if template is None:
        return None
    return template.format(login=event.sender.login)


def build_job(command: Command, event: CommentEvent) -> Optional[Job]:
    """
    Build the job that answers `command`.

    Returns:
        A job posting the reply on the event's issue, or None for IGNORE
    """
    reply = build_reply(command, event)
    if reply is None:
        return None

    job = Job()
    job.comment(event.repository.full_name, event.issue.number, reply)
    return job
