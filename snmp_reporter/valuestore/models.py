"""Polled value model consumed by the metric reporter.

A reporting pass works on a snapshot of values fetched from a device. Scalar
OIDs map to a single :class:`ResultValue`; column OIDs map to one value per
row, keyed by the row's full index (e.g. ``"1.3"``). The polling layer fills
the store; the reporter only reads it.
"""

from __future__ import annotations

import json
from pathlib import Path
from re import Pattern
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ValueNotFoundError(KeyError):
    """Raised when an OID is absent from the value store."""


def _decode_printable(raw: bytes) -> Optional[str]:
    """Return ``raw`` as text if it is printable UTF-8, else None."""
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        return None
    return text if text.isprintable() else None


class ResultValue(BaseModel):
    """Single polled value.

    Attributes
    ----------
    value: Any
        Raw payload. Numbers, strings and byte strings are understood; any
        other payload is carried as is and fails conversion.
    submission_type: str
        Optional submission type declared by the value itself (e.g.
        ``"counter"`` for SNMP Counter32). Empty when not declared.
    """

    model_config = ConfigDict(frozen=True)

    value: Any = None
    submission_type: str = ""

    def to_string(self) -> str:
        """Return the payload as a string.

        Raises
        ------
        ValueError
            If the payload has no string form.
        """
        value = self.value
        if isinstance(value, str):
            return value
        if isinstance(value, (bytes, bytearray)):
            raw = bytes(value)
            text = _decode_printable(raw)
            if text is None:
                return "0x" + raw.hex()
            return text
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            try:
                return str(int(value))
            except (OverflowError, ValueError) as exc:
                raise ValueError(f"cannot convert {value!r} to string: {exc}") from exc
        raise ValueError(f"invalid type {type(value).__name__} for value {value!r}")

    def to_float(self) -> float:
        """Return the payload as a float.

        Raises
        ------
        ValueError
            If the payload cannot be interpreted as a number.
        """
        value = self.value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            try:
                return float(value)
            except OverflowError as exc:
                raise ValueError(f"cannot convert {value!r} to float: {exc}") from exc
        if isinstance(value, (bytes, bytearray)):
            value = bytes(value).decode("utf-8", errors="replace")
        if isinstance(value, str):
            # underscores and surrounding spaces are not numbers on the wire
            if "_" in value or value != value.strip():
                raise ValueError(f"failed to parse `{value}`: not a plain number")
            try:
                return float(value)
            except ValueError as exc:
                raise ValueError(f"failed to parse `{value}`: {exc}") from exc
        raise ValueError(f"invalid type {type(value).__name__} for value {value!r}")

    def extract_string_value(self, pattern: Pattern[str]) -> "ResultValue":
        """Extract the first capture group of ``pattern`` from a string value.

        Numeric payloads are returned unchanged. The extracted value never
        carries the original ``submission_type``.

        Raises
        ------
        ValueError
            If the pattern does not match or has no capture group.
        """
        if not isinstance(self.value, (str, bytes, bytearray)):
            return self
        src_value = self.to_string()
        found = pattern.search(src_value)
        if found is None:
            raise ValueError(
                f"extract value pattern does not match "
                f"(pattern={pattern.pattern!r}, value={src_value!r})"
            )
        if pattern.groups < 1:
            raise ValueError(
                f"extract value pattern {pattern.pattern!r} has no matching group"
            )
        return ResultValue(value=found.group(1))


class ResultValueStore(BaseModel):
    """Values fetched for one reporting pass.

    Attributes
    ----------
    scalar_values: Dict[str, ResultValue]
        Scalar OID -> value.
    column_values: Dict[str, Dict[str, ResultValue]]
        Column OID -> (full row index -> value).
    """

    scalar_values: Dict[str, ResultValue] = Field(default_factory=dict)
    column_values: Dict[str, Dict[str, ResultValue]] = Field(default_factory=dict)

    def get_scalar_value(self, oid: str) -> ResultValue:
        """Return the scalar value for ``oid``.

        Raises
        ------
        ValueNotFoundError
            If ``oid`` was not polled.
        """
        try:
            return self.scalar_values[oid]
        except KeyError:
            raise ValueNotFoundError(
                f"value for scalar oid `{oid}` not found"
            ) from None

    def get_column_values(self, oid: str) -> Dict[str, ResultValue]:
        """Return a copy of the rows polled for column ``oid``.

        Raises
        ------
        ValueNotFoundError
            If ``oid`` was not polled.
        """
        try:
            rows = self.column_values[oid]
        except KeyError:
            raise ValueNotFoundError(
                f"value for column oid `{oid}` not found"
            ) from None
        return dict(rows)

    @staticmethod
    def load(path: Path) -> "ResultValueStore":
        """Load a value snapshot from a JSON file."""
        return ResultValueStore.model_validate(json.loads(path.read_bytes()))
