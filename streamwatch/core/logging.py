"""Logging configuration"""

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# discord.py and the HTTP stacks are chatty at INFO
NOISY_LOGGERS = ("discord", "discord.http", "discord.gateway", "aiohttp", "httpx", "httpcore")


def setup_logging(level_name: str = "INFO") -> None:
    """Configure application logging with a Rich handler.

    Falls back to a plain stream format if the console cannot be set up.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    try:
        # Enable UTF-8 output on Windows
        if sys.platform == "win32":
            import codecs

            sys.stdout = codecs.getwriter("utf-8")(sys.stdout.buffer)
            sys.stderr = codecs.getwriter("utf-8")(sys.stderr.buffer)

        rich_handler = RichHandler(
            console=Console(width=120),
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            tracebacks_width=120,
        )
        rich_handler.setFormatter(
            logging.Formatter(fmt="%(message)s", datefmt="[%Y-%m-%d %H:%M:%S]")
        )

        logging.basicConfig(
            level=level,
            format="%(message)s",
            datefmt="[%Y-%m-%d %H:%M:%S]",
            handlers=[rich_handler],
            force=True,
        )
    except Exception as e:
        logging.basicConfig(
            level=level, format=PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S", force=True
        )
        logging.getLogger(__name__).warning(
            f"Rich logging setup failed: {e}, using standard logging"
        )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
