"""Profile models: metric definitions and tag rules.

A profile lists the metrics to report for a device. Each metric is either a
scalar metric (one ``symbol`` backed by one OID) or a column metric (several
``symbols`` sharing the row index of one table). The two shapes are kept as a
discriminated union rather than a class hierarchy; the shape is picked from
the presence of the ``symbol`` key.

Tag rules (:class:`MetricTagConfig`) turn polled values or row indexes into
``key:value`` tags.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from re import Pattern
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
)

from ..valuestore.models import ResultValueStore, ValueNotFoundError

logger = logging.getLogger(__name__)


class MetricsConfigSymbol(BaseModel):
    """OID and metric name of a reported symbol.

    Attributes
    ----------
    oid: str
        OID the value is polled from.
    name: str
        Metric name, without the ``snmp.`` prefix.
    extract_value: Optional[Pattern[str]]
        Optional regex; when set, the reported value is its first capture
        group applied to the polled string (e.g. ``"(\\d+)C"`` for ``"23C"``).
    """

    oid: str
    name: str = ""
    extract_value: Optional[Pattern[str]] = None


class MetricsConfigOption(BaseModel):
    """Options used by the ``flag_stream`` forced type."""

    placement: int = Field(0, ge=0, description="1-based flag position")
    metric_suffix: str = Field("", description="Suffix appended to the name")


class MetricIndexTransform(BaseModel):
    """Inclusive slice of row index parts, both bounds 0-based."""

    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)


class MetricTagConfig(BaseModel):
    """Rule producing tags from a polled value or a row index.

    Attributes
    ----------
    tag: str
        Tag key; the tag is ``<tag>:<value>``.
    oid: str
        Scalar OID the value comes from (profile-level tags only).
    column: Optional[MetricsConfigSymbol]
        Column holding the tag value for each row (column metrics only).
    index: int
        1-based position in the dotted row index used as tag value.
    mapping: Dict[str, str]
        Translation of index values into tag values.
    index_transform: List[MetricIndexTransform]
        Slices of the row index used to find the row in ``column``, for
        tag columns indexed differently from the metric table.
    match: Optional[Pattern[str]]
        Regex applied to the value when ``tag`` is empty.
    tags: Dict[str, str]
        Tag key -> template expanded against ``match`` (``\\1`` group refs).
    """

    tag: str = ""
    oid: str = ""
    column: Optional[MetricsConfigSymbol] = None
    index: int = Field(0, ge=0)
    mapping: Dict[str, str] = Field(default_factory=dict)
    index_transform: List[MetricIndexTransform] = Field(default_factory=list)
    match: Optional[Pattern[str]] = None
    tags: Dict[str, str] = Field(default_factory=dict)

    def get_tags(self, value: str) -> List[str]:
        """Return the tags produced by this rule for ``value``."""
        if self.tag:
            return [f"{self.tag}:{value}"]
        tags: List[str] = []
        if self.match is None:
            return tags
        found = self.match.search(value)
        if found is None:
            return tags
        for key in sorted(self.tags):
            try:
                expanded = found.expand(self.tags[key])
            except (re.error, IndexError) as exc:
                logger.debug(
                    "tags.match.expand_failed",
                    extra={
                        "tag": key,
                        "template": self.tags[key],
                        "error": str(exc),
                    },
                )
                continue
            if not expanded:
                logger.debug(
                    "tags.match.empty_value",
                    extra={
                        "tag": key,
                        "pattern": self.match.pattern,
                        "value": value,
                    },
                )
                continue
            tags.append(f"{key}:{expanded}")
        return tags

    def get_index_tags(self, full_index: str) -> List[str]:
        """Return the tag taken from the row index, if any."""
        if not self.index:
            return []
        indexes = full_index.split(".")
        if self.index > len(indexes):
            logger.debug(
                "tags.index.out_of_range",
                extra={"index": self.index, "full_index": full_index},
            )
            return []
        tag_value = indexes[self.index - 1]
        if self.mapping:
            if tag_value not in self.mapping:
                logger.debug(
                    "tags.index.mapping_missing",
                    extra={"tag": self.tag, "index_value": tag_value},
                )
                return []
            tag_value = self.mapping[tag_value]
        return [f"{self.tag}:{tag_value}"]

    def get_column_tags(
        self, full_index: str, values: ResultValueStore
    ) -> List[str]:
        """Return the tags taken from the tag column row matching the index."""
        if self.column is None or not self.column.oid:
            return []
        try:
            column_values = values.get_column_values(self.column.oid)
        except ValueNotFoundError as exc:
            logger.debug("tags.column.lookup_failed", extra={"error": str(exc)})
            return []
        row_index = full_index
        if self.index_transform:
            try:
                row_index = transform_index(full_index, self.index_transform)
            except ValueError as exc:
                logger.debug(
                    "tags.column.transform_failed", extra={"error": str(exc)}
                )
                return []
        if row_index not in column_values:
            logger.debug(
                "tags.column.row_missing",
                extra={"oid": self.column.oid, "full_index": row_index},
            )
            return []
        try:
            str_value = column_values[row_index].to_string()
        except ValueError as exc:
            logger.debug("tags.column.to_string_failed", extra={"error": str(exc)})
            return []
        return self.get_tags(str_value)


def transform_index(full_index: str, rules: List[MetricIndexTransform]) -> str:
    """Rebuild a row index from slices of ``full_index``.

    Raises
    ------
    ValueError
        If a slice reaches past the end of the index.
    """
    indexes = full_index.split(".")
    parts: List[str] = []
    for rule in rules:
        if rule.start > rule.end or rule.end >= len(indexes):
            raise ValueError(
                f"index transform [{rule.start}:{rule.end}] out of range "
                f"for index `{full_index}`"
            )
        parts.extend(indexes[rule.start : rule.end + 1])
    return ".".join(parts)


class ScalarMetricsConfig(BaseModel):
    """Metric backed by a single scalar OID.

    Attributes
    ----------
    symbol: MetricsConfigSymbol
        Reported symbol.
    metric_tags: List[str]
        Static tags appended to the base tags.
    forced_type: str
        Submission type override; accepted as ``metric_type`` in profiles.
    options: MetricsConfigOption
        Options for ``flag_stream``.
    """

    kind: Literal["scalar"] = "scalar"
    symbol: MetricsConfigSymbol
    metric_tags: List[str] = Field(default_factory=list)
    forced_type: str = Field(
        "", validation_alias=AliasChoices("forced_type", "metric_type")
    )
    options: MetricsConfigOption = Field(default_factory=MetricsConfigOption)

    def is_scalar(self) -> bool:
        return True

    def is_column(self) -> bool:
        return False

    def get_symbol_tags(self) -> List[str]:
        return list(self.metric_tags)


class ColumnMetricsConfig(BaseModel):
    """Metric backed by columns of one table.

    Attributes
    ----------
    table: Optional[MetricsConfigSymbol]
        Table the columns belong to, informational.
    symbols: List[MetricsConfigSymbol]
        Reported columns, processed in declaration order.
    metric_tags: List[MetricTagConfig]
        Per-row tag rules.
    forced_type: str
        Submission type override; accepted as ``metric_type`` in profiles.
    options: MetricsConfigOption
        Options for ``flag_stream``.
    """

    kind: Literal["column"] = "column"
    table: Optional[MetricsConfigSymbol] = None
    symbols: List[MetricsConfigSymbol] = Field(default_factory=list)
    metric_tags: List[MetricTagConfig] = Field(default_factory=list)
    forced_type: str = Field(
        "", validation_alias=AliasChoices("forced_type", "metric_type")
    )
    options: MetricsConfigOption = Field(default_factory=MetricsConfigOption)

    def is_scalar(self) -> bool:
        return False

    def is_column(self) -> bool:
        return True

    def get_tags(self, full_index: str, values: ResultValueStore) -> List[str]:
        """Evaluate every per-row tag rule for the row ``full_index``."""
        row_tags: List[str] = []
        for metric_tag in self.metric_tags:
            row_tags.extend(metric_tag.get_index_tags(full_index))
            row_tags.extend(metric_tag.get_column_tags(full_index, values))
        return row_tags


def _metric_shape(raw: Any) -> str:
    if isinstance(raw, dict):
        if raw.get("kind") in ("scalar", "column"):
            return raw["kind"]
        return "scalar" if raw.get("symbol") is not None else "column"
    return getattr(raw, "kind", "column")


MetricsConfig = Annotated[
    Union[
        Annotated[ScalarMetricsConfig, Tag("scalar")],
        Annotated[ColumnMetricsConfig, Tag("column")],
    ],
    Discriminator(_metric_shape),
]

_metrics_config_adapter: TypeAdapter[MetricsConfig] = TypeAdapter(MetricsConfig)


def parse_metric(
    raw: Dict[str, Any]
) -> Union[ScalarMetricsConfig, ColumnMetricsConfig]:
    """Build a scalar or column metric definition from its profile entry."""
    return _metrics_config_adapter.validate_python(raw)


class ProfileConfig(BaseModel):
    """Metric definitions of a device profile.

    Attributes
    ----------
    metrics: List[MetricsConfig]
        Metric definitions, reported in order.
    metric_tags: List[MetricTagConfig]
        Profile-level tags resolved from scalar OIDs and added to every
        metric of the device.
    """

    metrics: List[MetricsConfig] = Field(default_factory=list)
    metric_tags: List[MetricTagConfig] = Field(default_factory=list)

    @staticmethod
    def load(path: Path) -> "ProfileConfig":
        """Load a profile from a JSON file."""
        return ProfileConfig.model_validate(json.loads(path.read_bytes()))
