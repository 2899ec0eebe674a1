import logging
from datetime import date
from logging.handlers import RotatingFileHandler
from pathlib import Path

_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

_console: logging.Handler | None = None
_file: logging.Handler | None = None


def configure_logging(level: str | int = logging.INFO, log_dir: str | None = "logs") -> None:
    """Console logging, plus one rotating file per launch date once log_dir is known."""
    global _console, _file
    logger = logging.getLogger()
    logger.setLevel(level)

    fmt = logging.Formatter(_FORMAT)

    # Console
    if _console is None:
        _console = logging.StreamHandler()
        _console.setFormatter(fmt)
        logger.addHandler(_console)

    # Rotating file (avoid filling SD card)
    if log_dir and _file is None:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        _file = RotatingFileHandler(
            Path(log_dir) / f"{date.today().isoformat()}.log",
            maxBytes=2_000_000,
            backupCount=5,
        )
        _file.setFormatter(fmt)
        logger.addHandler(_file)

    # Silence noisy httpx request logging
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
