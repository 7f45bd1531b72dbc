"""
Command line entry point: ``python -m fxabot <config.toml>``.
"""

import argparse
import sys
from typing import List, Optional

from fxabot.bot import FxaBot
from fxabot.config import ConfigError, Settings
from fxabot.utils.logging import get_logger, setup_logging

logger = get_logger("fxabot")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="fxabot", description="GitHub comment bot")
    parser.add_argument("config", help="path to the TOML configuration file")
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_file(args.config)
    except ConfigError as e:
        print(f"beep! error: {e}", file=sys.stderr)
        return 1

    setup_logging(settings.log_level)
    logger.info(f"boop: using config file {args.config!r}")

    FxaBot(settings).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
