"""Backend sink interface.

The metric reporter never accumulates or ships time series itself; it hands
every submission to a :class:`Sender` provided by the host agent.
"""

from __future__ import annotations

from enum import IntEnum
from typing import List, Protocol


class ServiceCheckStatus(IntEnum):
    """Status of a service check."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


class Sender(Protocol):
    """Protocol for metric backends.

    Implementations accept submissions for one check instance. Tag lists
    passed in are owned by the implementation.
    """

    def gauge(self, metric: str, value: float, hostname: str, tags: List[str]) -> None:
        """Submit a gauge sample."""
        raise NotImplementedError

    def rate(self, metric: str, value: float, hostname: str, tags: List[str]) -> None:
        """Submit a raw counter sample to be reported as a per-second rate."""
        raise NotImplementedError

    def monotonic_count(
        self, metric: str, value: float, hostname: str, tags: List[str]
    ) -> None:
        """Submit a monotonically increasing counter sample."""
        raise NotImplementedError

    def service_check(
        self,
        check_name: str,
        status: ServiceCheckStatus,
        hostname: str,
        tags: List[str],
        message: str,
    ) -> None:
        """Submit a service check result."""
        raise NotImplementedError
