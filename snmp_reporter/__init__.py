"""
SNMP metric reporter package.

This package turns polled SNMP values into gauge, rate and monotonic count
submissions for a metrics backend, following the metric definitions of a
device profile. See README.md for usage.
"""

from .__version__ import __version__

__all__ = ["__version__"]
