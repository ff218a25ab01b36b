"""Console logging for loan-to-card runs."""

import logging
import sys
from typing import TextIO

# Below DEBUG; also shows raw RPC traffic.
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Third-party loggers that echo every JSON-RPC request at DEBUG.
RPC_LOGGERS = ("web3", "urllib3")

LEVEL_COLORS = {
    "TRACE": "\033[90m",
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}


class ColoredFormatter(logging.Formatter):
    """Paints the level name; plain output when ``use_color`` is off."""

    RESET = "\033[0m"
    BOLD = "\033[1m"

    def __init__(self, fmt: str, datefmt: str | None = None, use_color: bool = True):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelname)
        if not self.use_color or color is None:
            return super().format(record)

        original = record.levelname
        record.levelname = f"{color}{self.BOLD}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def resolve_level(log_level: str) -> int:
    """Numeric level for a name such as ``"debug"`` or ``"TRACE"``.

    Raises:
        ValueError: If the name is not a logging level.
    """
    name = log_level.strip().upper()
    if name == "TRACE":
        return TRACE
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")
    return level


def setup_logging(log_level: str = "INFO", stream: TextIO | None = None) -> None:
    """Route all logging to ``stream`` (stdout by default).

    Colors are used only when the stream is a terminal. RPC loggers are held
    at WARNING unless the level is TRACE.
    """
    stream = stream or sys.stdout
    level = resolve_level(log_level)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        ColoredFormatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            use_color=stream.isatty(),
        )
    )
    logging.basicConfig(level=level, handlers=[handler], force=True)

    rpc_level = TRACE if level <= TRACE else max(level, logging.WARNING)
    for name in RPC_LOGGERS:
        logging.getLogger(name).setLevel(rpc_level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
