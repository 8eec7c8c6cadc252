"""Tests for logging setup."""

import logging

from snmp_reporter.observability import setup_logging


def test_setup_logging_sets_root_level():
    """The requested level applies to the root logger."""
    root = logging.getLogger()
    previous = root.level
    try:
        setup_logging("DEBUG")
        assert root.level == logging.DEBUG
        setup_logging("warning")
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous)


def test_setup_logging_unknown_level_falls_back_to_info():
    """Unknown level names fall back to INFO."""
    root = logging.getLogger()
    previous = root.level
    try:
        setup_logging("chatty")
        assert root.level == logging.INFO
    finally:
        root.setLevel(previous)
