"""Metric reporting: turn polled values into backend submissions.

:class:`MetricSender` walks the metric definitions of a profile, resolves
their values and tags from the pass's :class:`ResultValueStore`, coerces the
values to the configured submission type and submits them. A bad value or a
misconfigured metric only skips that metric (or row); a reporting pass always
goes through every definition.
"""

from __future__ import annotations

import logging
from re import Pattern
from typing import Callable, Dict, List, Optional, Sequence, Union

from ..aggregator import Sender, ServiceCheckStatus
from ..config.metrics import (
    ColumnMetricsConfig,
    MetricsConfigOption,
    MetricsConfigSymbol,
    MetricTagConfig,
    ScalarMetricsConfig,
)
from ..valuestore.models import ResultValue, ResultValueStore, ValueNotFoundError

logger = logging.getLogger(__name__)

METRIC_PREFIX = "snmp."
RATE_SUFFIX = ".rate"
FLAG_STREAM = "flag_stream"

DerivedMetricHook = Callable[
    [MetricsConfigSymbol, str, ResultValueStore, List[str]], None
]


def _no_derived_metric(
    symbol: MetricsConfigSymbol,
    full_index: str,
    values: ResultValueStore,
    tags: List[str],
) -> None:
    return None


def get_flag_stream_value(placement: int, str_value: str) -> float:
    """Return 1.0 if the flag at 1-based ``placement`` is ``'1'``, else 0.0.

    Raises
    ------
    ValueError
        If ``placement`` is not a position of ``str_value``.
    """
    if placement < 1 or placement > len(str_value):
        raise ValueError(
            f"flag stream index `{placement - 1}` not found in `{str_value}`"
        )
    return 1.0 if str_value[placement - 1] == "1" else 0.0


class MetricSender:
    """Report metric definitions to a backend sender.

    Parameters
    ----------
    sender: Sender
        Backend receiving the submissions.
    hostname: str
        Host attached to every submission; empty for the backend default.
    derived_metric_hook: Optional[DerivedMetricHook]
        Called for every reported column row with the symbol, the row index,
        the value store and the row tags; used to compute metrics derived
        from several columns (e.g. interface bandwidth usage).

    Attributes
    ----------
    submitted_metrics: int
        Number of submissions made since creation. Never reset here.
    """

    def __init__(
        self,
        sender: Sender,
        hostname: str = "",
        derived_metric_hook: Optional[DerivedMetricHook] = None,
    ) -> None:
        self.sender = sender
        self.hostname = hostname
        self.derived_metric_hook = derived_metric_hook or _no_derived_metric
        self.submitted_metrics = 0

    def report_metrics(
        self,
        metrics: Sequence[Union[ScalarMetricsConfig, ColumnMetricsConfig]],
        values: ResultValueStore,
        tags: List[str],
    ) -> None:
        """Report every metric definition for one pass."""
        for metric in metrics:
            if metric.is_scalar():
                self._report_scalar_metric(metric, values, tags)
            elif metric.is_column():
                self._report_column_metric(metric, values, tags)

    def get_check_instance_metric_tags(
        self, metric_tags: List[MetricTagConfig], values: ResultValueStore
    ) -> List[str]:
        """Resolve profile-level tags from their scalar OIDs."""
        global_tags: List[str] = []
        for metric_tag in metric_tags:
            try:
                value = values.get_scalar_value(metric_tag.oid)
            except ValueNotFoundError as exc:
                logger.debug("metric_tags.lookup_failed", extra={"error": str(exc)})
                continue
            try:
                str_value = value.to_string()
            except ValueError as exc:
                logger.debug(
                    "metric_tags.to_string_failed",
                    extra={"oid": metric_tag.oid, "error": str(exc)},
                )
                continue
            global_tags.extend(metric_tag.get_tags(str_value))
        return global_tags

    def _report_scalar_metric(
        self,
        metric: ScalarMetricsConfig,
        values: ResultValueStore,
        tags: List[str],
    ) -> None:
        try:
            value = values.get_scalar_value(metric.symbol.oid)
        except ValueNotFoundError as exc:
            logger.debug("report.scalar.lookup_failed", extra={"error": str(exc)})
            return
        scalar_tags = list(tags) + metric.get_symbol_tags()
        self.send_metric(
            metric.symbol.name,
            value,
            scalar_tags,
            metric.forced_type,
            metric.options,
            metric.symbol.extract_value,
        )

    def _report_column_metric(
        self,
        metric: ColumnMetricsConfig,
        values: ResultValueStore,
        tags: List[str],
    ) -> None:
        row_tags_cache: Dict[str, List[str]] = {}
        for symbol in metric.symbols:
            try:
                metric_values = values.get_column_values(symbol.oid)
            except ValueNotFoundError as exc:
                logger.debug("report.column.lookup_failed", extra={"error": str(exc)})
                continue
            for full_index, value in metric_values.items():
                # row tags are shared by every symbol of the table
                if full_index not in row_tags_cache:
                    row_tags_cache[full_index] = list(tags) + metric.get_tags(
                        full_index, values
                    )
                    logger.debug(
                        "report.column.row_tags_cached",
                        extra={
                            "full_index": full_index,
                            "tags": row_tags_cache[full_index],
                        },
                    )
                row_tags = row_tags_cache[full_index]
                self.send_metric(
                    symbol.name,
                    value,
                    row_tags,
                    metric.forced_type,
                    metric.options,
                    symbol.extract_value,
                )
                self.derived_metric_hook(symbol, full_index, values, list(row_tags))

    def send_metric(
        self,
        metric_name: str,
        value: ResultValue,
        tags: List[str],
        forced_type: str,
        options: MetricsConfigOption,
        extract_value_pattern: Optional[Pattern[str]] = None,
    ) -> None:
        """Coerce ``value`` and submit it under ``snmp.<metric_name>``."""
        if extract_value_pattern is not None:
            try:
                value = value.extract_string_value(extract_value_pattern)
            except ValueError as exc:
                logger.debug(
                    "send.extract_value_failed",
                    extra={"metric": metric_name, "error": str(exc)},
                )
                return

        metric_full_name = METRIC_PREFIX + metric_name
        if not forced_type:
            forced_type = value.submission_type or "gauge"
        elif forced_type == FLAG_STREAM:
            try:
                str_value = value.to_string()
                flag_value = get_flag_stream_value(options.placement, str_value)
            except ValueError as exc:
                logger.debug(
                    "send.flag_stream_failed",
                    extra={"metric": metric_full_name, "error": str(exc)},
                )
                return
            metric_full_name = f"{metric_full_name}.{options.metric_suffix}"
            value = ResultValue(value=flag_value)
            forced_type = "gauge"

        try:
            float_value = value.to_float()
        except ValueError as exc:
            logger.debug(
                "send.to_float_failed",
                extra={"metric": metric_full_name, "error": str(exc)},
            )
            return

        if forced_type == "gauge":
            self.gauge(metric_full_name, float_value, tags)
            self.submitted_metrics += 1
        elif forced_type == "counter":
            self.rate(metric_full_name, float_value, tags)
            self.submitted_metrics += 1
        elif forced_type == "percent":
            self.rate(metric_full_name, float_value * 100, tags)
            self.submitted_metrics += 1
        elif forced_type == "monotonic_count":
            self.monotonic_count(metric_full_name, float_value, tags)
            self.submitted_metrics += 1
        elif forced_type == "monotonic_count_and_rate":
            self.monotonic_count(metric_full_name, float_value, tags)
            self.rate(metric_full_name + RATE_SUFFIX, float_value, tags)
            self.submitted_metrics += 2
        else:
            logger.debug(
                "send.unsupported_forced_type",
                extra={"metric": metric_full_name, "forced_type": forced_type},
            )

    # The backend may keep the tag lists it receives; always hand over a copy.
    def gauge(self, metric: str, value: float, tags: List[str]) -> None:
        self.sender.gauge(metric, value, self.hostname, list(tags))

    def rate(self, metric: str, value: float, tags: List[str]) -> None:
        self.sender.rate(metric, value, self.hostname, list(tags))

    def monotonic_count(self, metric: str, value: float, tags: List[str]) -> None:
        self.sender.monotonic_count(metric, value, self.hostname, list(tags))

    def service_check(
        self,
        check_name: str,
        status: ServiceCheckStatus,
        tags: List[str],
        message: str = "",
    ) -> None:
        self.sender.service_check(
            check_name, status, self.hostname, list(tags), message
        )
