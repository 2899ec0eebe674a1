from __future__ import annotations

import logging
import subprocess
from typing import Sequence

logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    pass


def run_command(args: Sequence[str], timeout: float = 5.0) -> str:
    """Run an OS tool and return its stdout. Raise CommandError on any failure."""
    try:
        proc = subprocess.run(
            list(args),
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise CommandError(f"{args[0]}: command not found") from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(f"{' '.join(args)}: timed out after {timeout}s") from e

    if proc.returncode != 0:
        raise CommandError(
            f"{' '.join(args)}: exit status {proc.returncode}: {proc.stderr.strip()}"
        )
    return proc.stdout
