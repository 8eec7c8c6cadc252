"""Metric reporting for one polled device."""

from .metric_sender import MetricSender

__all__ = ["MetricSender"]
