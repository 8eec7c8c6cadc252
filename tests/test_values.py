"""Tests for polled values and the per-pass value store."""

import re

import pytest

from snmp_reporter.valuestore.models import (
    ResultValue,
    ResultValueStore,
    ValueNotFoundError,
)


def test_to_float_from_numbers_and_strings():
    """Numbers convert directly, strings and bytes are parsed."""
    assert ResultValue(value=42).to_float() == 42.0
    assert ResultValue(value=3.5).to_float() == 3.5
    assert ResultValue(value="12.25").to_float() == 12.25
    assert ResultValue(value=b"7").to_float() == 7.0


def test_to_float_rejects_non_numeric_payloads():
    """Unparseable strings and opaque payloads fail conversion."""
    with pytest.raises(ValueError):
        ResultValue(value="up").to_float()
    with pytest.raises(ValueError):
        ResultValue(value=None).to_float()
    with pytest.raises(ValueError):
        ResultValue(value=[1, 2]).to_float()


def test_to_string_forms():
    """Strings pass through, floats are truncated, bytes decoded or hexed."""
    assert ResultValue(value="eth0").to_string() == "eth0"
    assert ResultValue(value=3.7).to_string() == "3"
    assert ResultValue(value=10).to_string() == "10"
    assert ResultValue(value=b"router-1").to_string() == "router-1"
    assert ResultValue(value=b"\x00\x1a\xff").to_string() == "0x001aff"


def test_to_string_rejects_opaque_payloads():
    """Payloads without a string form raise ValueError."""
    with pytest.raises(ValueError):
        ResultValue(value=None).to_string()
    with pytest.raises(ValueError):
        ResultValue(value=float("inf")).to_string()


def test_extract_string_value_returns_first_group_without_hint():
    """Extraction keeps the first capture group and drops the type hint."""
    value = ResultValue(value="temp: 23C", submission_type="counter")

    extracted = value.extract_string_value(re.compile(r"(\d+)C"))

    assert extracted.value == "23"
    assert extracted.submission_type == ""
    assert extracted.to_float() == 23.0


def test_extract_string_value_failures():
    """A non-matching pattern or a pattern without groups raises."""
    value = ResultValue(value="temp: n/a")
    with pytest.raises(ValueError):
        value.extract_string_value(re.compile(r"(\d+)C"))
    with pytest.raises(ValueError):
        ResultValue(value="23C").extract_string_value(re.compile(r"\d+C"))


def test_extract_string_value_leaves_numbers_untouched():
    """Numeric payloads are returned unchanged."""
    value = ResultValue(value=5.0, submission_type="counter")
    assert value.extract_string_value(re.compile(r"(\d+)")) is value


def test_store_lookups():
    """Scalar and column lookups return values or raise on a miss."""
    store = ResultValueStore(
        scalar_values={"1.3.6.1.2.1.1.3.0": ResultValue(value=100)},
        column_values={
            "1.3.6.1.2.1.2.2.1.10": {
                "1": ResultValue(value=10),
                "2": ResultValue(value=20),
            },
            "1.3.6.1.2.1.2.2.1.16": {},
        },
    )

    assert store.get_scalar_value("1.3.6.1.2.1.1.3.0").to_float() == 100.0
    assert set(store.get_column_values("1.3.6.1.2.1.2.2.1.10")) == {"1", "2"}
    assert store.get_column_values("1.3.6.1.2.1.2.2.1.16") == {}
    with pytest.raises(ValueNotFoundError):
        store.get_scalar_value("1.2.3")
    with pytest.raises(KeyError):
        store.get_column_values("1.2.3")


def test_column_lookup_returns_copy():
    """Mutating the returned rows does not change the store."""
    store = ResultValueStore(column_values={"1.2": {"1": ResultValue(value=1)}})

    rows = store.get_column_values("1.2")
    rows.clear()

    assert store.get_column_values("1.2") == {"1": ResultValue(value=1)}


def test_store_load_from_json(tmp_path):
    """Snapshots load from JSON files."""
    path = tmp_path / "values.json"
    path.write_text(
        '{"scalar_values": {"1.1": {"value": "42", "submission_type": "counter"}},'
        ' "column_values": {"1.2": {"3": {"value": 7}}}}'
    )

    store = ResultValueStore.load(path)

    assert store.get_scalar_value("1.1").submission_type == "counter"
    assert store.get_scalar_value("1.1").to_float() == 42.0
    assert store.get_column_values("1.2")["3"].to_float() == 7.0


def test_to_string_decodes_printable_utf8_bytes():
    """Non-ASCII text in byte payloads is decoded, not hexed."""
    assert ResultValue(value=b"caf\xc3\xa9").to_string() == "café"
    assert ResultValue(value="Büro-Link".encode()).to_string() == "Büro-Link"


def test_to_string_hexes_invalid_or_unprintable_utf8():
    """Undecodable or control-character bytes are rendered as hex."""
    assert ResultValue(value=b"\xc3\x28").to_string() == "0xc328"
    assert ResultValue(value=b"ab\ncd").to_string() == "0x61620a6364"


def test_to_float_rejects_oversized_integers():
    """Integers beyond float range fail with ValueError."""
    with pytest.raises(ValueError):
        ResultValue(value=10**400).to_float()


def test_to_float_accepts_only_plain_literals():
    """Padded strings and digit separators are not numbers."""
    for raw in (" 5 ", "5\n", "1_000", b"1_000"):
        with pytest.raises(ValueError):
            ResultValue(value=raw).to_float()
    assert ResultValue(value="-1.5e3").to_float() == -1500.0
