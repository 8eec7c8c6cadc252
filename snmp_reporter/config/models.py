"""Environment settings.

Device profiles and value snapshots are described in
:mod:`snmp_reporter.config.metrics`; this module only holds the settings
read from the environment (and an optional ``.env`` file).
"""

from __future__ import annotations

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvSettings(BaseSettings):
    """Environment-driven settings and .env support.

    Attributes
    ----------
    log_level: str
        Logging level name (e.g., "DEBUG", "INFO"). Defaults to "INFO".
    hostname: str
        Host passed along with every submission. Empty means the backend
        default host.
    default_tags: List[str]
        Tags added to the base tags of every reporting pass, given as a JSON
        list (e.g. ``SNMP_REPORTER_DEFAULT_TAGS='["env:prod"]'``).
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="SNMP_REPORTER_")

    log_level: str = Field("INFO")
    hostname: str = Field("", description="Host attached to submissions")
    default_tags: List[str] = Field(
        default_factory=list,
        description="Tags added to every reporting pass",
    )
