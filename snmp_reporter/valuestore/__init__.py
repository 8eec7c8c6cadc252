"""Per-pass store of polled SNMP values."""

from .models import ResultValue, ResultValueStore, ValueNotFoundError

__all__ = ["ResultValue", "ResultValueStore", "ValueNotFoundError"]
