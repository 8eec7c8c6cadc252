"""Command-line interface to run one reporting pass offline.

The CLI loads a device profile and a snapshot of polled values, reports the
profile's metrics into an in-memory sender and prints the resulting
submissions as JSON. It is meant for developing and checking profiles
against captured device data.

Usage
-----
    python -m snmp_reporter.cli --profile profile.json --values values.json
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .aggregator.recording import RecordingSender
from .config.metrics import ProfileConfig
from .config.models import EnvSettings
from .observability import setup_logging
from .reporter import MetricSender
from .valuestore.models import ResultValueStore


def run_report(
    profile: ProfileConfig,
    values: ResultValueStore,
    tags: List[str],
    hostname: str = "",
) -> RecordingSender:
    """Report ``profile`` against ``values`` and return the recorded sender.

    Profile-level metric tags are resolved from ``values`` and appended to
    ``tags`` before the metrics are reported.
    """
    sender = RecordingSender()
    metric_sender = MetricSender(sender, hostname=hostname)
    base_tags = list(tags) + metric_sender.get_check_instance_metric_tags(
        profile.metric_tags, values
    )
    metric_sender.report_metrics(profile.metrics, values, base_tags)
    return sender


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entrypoint for a single offline reporting pass."""
    parser = argparse.ArgumentParser(description="SNMP metric reporter CLI")
    parser.add_argument("--profile", required=True, help="Path to JSON profile")
    parser.add_argument(
        "--values", required=True, help="Path to JSON snapshot of polled values"
    )
    parser.add_argument(
        "--tag",
        dest="tags",
        action="append",
        default=[],
        help="Base tag added to every submission (repeatable)",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=[
            "CRITICAL",
            "ERROR",
            "WARNING",
            "INFO",
            "DEBUG",
        ],
        help="Logging level (overrides environment)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (once sets DEBUG)",
    )
    args = parser.parse_args(argv)

    settings = EnvSettings()
    # Determine effective log level
    effective_level = args.log_level or (
        "DEBUG" if args.verbose > 0 else settings.log_level.upper()
    )
    setup_logging(effective_level)

    profile = ProfileConfig.load(Path(args.profile))
    values = ResultValueStore.load(Path(args.values))
    sender = run_report(
        profile,
        values,
        settings.default_tags + args.tags,
        hostname=settings.hostname,
    )

    json.dump(
        [submission.model_dump(mode="json") for submission in sender.submissions],
        sys.stdout,
        indent=2,
    )
    sys.stdout.write("\n")
    sys.stderr.write(f"{len(sender.submissions)} submissions\n")


if __name__ == "__main__":
    main()
