from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Source(ABC):
    """A reader for one hardware/OS source, polled once per cycle."""

    @property
    @abstractmethod
    def source_id(self) -> str:
        ...

    @abstractmethod
    def empty(self) -> Any:
        """Return this source's value with every field absent."""
        ...

    @abstractmethod
    def read(self) -> Any:
        """Return typed optional values. Field failures become None, never raise."""
        ...
