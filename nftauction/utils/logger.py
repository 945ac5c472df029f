"""
Logging for the auction ledger.

All loggers live under the "nftauction" namespace, one child per
subsystem:

    nftauction.ledger    listings and settlements (INFO), bids and
                         withdrawals (DEBUG), refused transfers (WARNING),
                         settlements that could not be undone (CRITICAL)
    nftauction.custody   rejected asset moves and payments (WARNING)
    nftauction.storage   database location and reloads (INFO)

Console output is colourised; a plain-text copy can be written to
<log_dir>/nftauction.log for post-mortem of stranded settlements.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import colorlog


LOGGER_NAMESPACE = "nftauction"
LOG_FILE_NAME = "nftauction.log"

LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    # Stranded escrow needs an operator
    "CRITICAL": "red,bg_white",
}


class AuctionLogger:
    """Configures the nftauction logger tree once per process"""

    _initialized = False
    _log_dir: Optional[Path] = None

    @classmethod
    def setup(
        cls,
        level: int = logging.INFO,
        log_dir: Optional[str] = None,
        log_to_file: bool = False,
        force: bool = False,
    ):
        """
        Attach console (and optionally file) handlers to the namespace logger.

        Args:
            level: Threshold for both handlers
            log_dir: Directory for nftauction.log. If None, uses ./logs
            log_to_file: Also write a plain-text log file
            force: Replace handlers installed by an earlier call
                (the CLI uses this to apply --debug)
        """
        if cls._initialized and not force:
            return

        if log_to_file:
            cls._log_dir = Path(log_dir) if log_dir else Path("logs")
            cls._log_dir.mkdir(exist_ok=True, parents=True)

        namespace_logger = logging.getLogger(LOGGER_NAMESPACE)
        namespace_logger.setLevel(level)
        namespace_logger.handlers.clear()

        console_handler = colorlog.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(
            colorlog.ColoredFormatter(
                "%(log_color)s%(asctime)s [%(name)s] %(levelname)-8s%(reset)s %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
                log_colors=LEVEL_COLORS,
            )
        )
        namespace_logger.addHandler(console_handler)

        if log_to_file and cls._log_dir:
            file_handler = logging.FileHandler(cls._log_dir / LOG_FILE_NAME)
            file_handler.setLevel(level)
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s [%(name)s] %(levelname)-8s %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
            namespace_logger.addHandler(file_handler)

        cls._initialized = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Logger for one ledger subsystem.

        Installs the default INFO console setup on first use, so library
        embedders get output without calling setup themselves.

        Args:
            name: Subsystem name ('ledger', 'custody', 'storage.sqlite', ...)
        """
        if not cls._initialized:
            cls.setup()

        return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def get_logger(name: str) -> logging.Logger:
    return AuctionLogger.get_logger(name)


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    log_to_file: bool = False,
):
    """Reconfigure ledger logging, replacing the default console setup"""
    AuctionLogger.setup(level=level, log_dir=log_dir, log_to_file=log_to_file, force=True)
