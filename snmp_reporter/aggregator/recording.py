"""In-memory sender keeping submissions in call order.

Used by the CLI to print the outcome of a reporting pass, and by tests.
"""

from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from . import ServiceCheckStatus


class SubmissionKind(str, Enum):
    """Metric submission kinds accepted by the backend."""

    GAUGE = "gauge"
    RATE = "rate"
    MONOTONIC_COUNT = "monotonic_count"


class Submission(BaseModel):
    """One metric sample handed to the backend.

    Attributes
    ----------
    kind: SubmissionKind
        Backend primitive used.
    name: str
        Full metric name (e.g. "snmp.ifInOctets").
    value: float
        Submitted value.
    hostname: str
        Host override; empty for the default host.
    tags: List[str]
        Tags of the sample, duplicates preserved.
    """

    kind: SubmissionKind
    name: str
    value: float
    hostname: str = ""
    tags: List[str] = Field(default_factory=list)


class ServiceCheck(BaseModel):
    """One service check handed to the backend."""

    name: str
    status: ServiceCheckStatus
    hostname: str = ""
    tags: List[str] = Field(default_factory=list)
    message: str = ""


class RecordingSender:
    """Sender that records everything it receives."""

    def __init__(self) -> None:
        self.submissions: List[Submission] = []
        self.service_checks: List[ServiceCheck] = []

    def _record(
        self,
        kind: SubmissionKind,
        metric: str,
        value: float,
        hostname: str,
        tags: List[str],
    ) -> None:
        self.submissions.append(
            Submission(
                kind=kind, name=metric, value=value, hostname=hostname, tags=tags
            )
        )

    def gauge(self, metric: str, value: float, hostname: str, tags: List[str]) -> None:
        self._record(SubmissionKind.GAUGE, metric, value, hostname, tags)

    def rate(self, metric: str, value: float, hostname: str, tags: List[str]) -> None:
        self._record(SubmissionKind.RATE, metric, value, hostname, tags)

    def monotonic_count(
        self, metric: str, value: float, hostname: str, tags: List[str]
    ) -> None:
        self._record(SubmissionKind.MONOTONIC_COUNT, metric, value, hostname, tags)

    def service_check(
        self,
        check_name: str,
        status: ServiceCheckStatus,
        hostname: str,
        tags: List[str],
        message: str,
    ) -> None:
        self.service_checks.append(
            ServiceCheck(
                name=check_name,
                status=status,
                hostname=hostname,
                tags=tags,
                message=message,
            )
        )

    def reset(self) -> None:
        """Forget everything recorded so far."""
        self.submissions.clear()
        self.service_checks.clear()
