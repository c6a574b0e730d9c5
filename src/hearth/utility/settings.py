"""
Process-wide settings that make hearth feel like home.

File logging can be switched off before hearth is imported by setting
``HEARTH_LOG_TO_FILE=false`` in the environment.
"""
import os
from typing import Optional

from pydantic import BaseModel, Field


def _log_to_file_default() -> bool:
    return os.environ.get("HEARTH_LOG_TO_FILE", "true").strip().lower() not in (
        "false",
        "0",
        "no",
    )


class LogSettings(BaseModel):
    """Where and how hearth writes its log output."""
    to_file: bool = Field(
        default_factory=_log_to_file_default,
        description="Also write log lines to a file next to the worker"
    )
    directory: str = Field(
        default="logs",
        description="Directory (relative to the working directory) for log files"
    )
    filename: str = Field(default="hearth.log", description="Log file name")


class Settings(BaseModel):
    """Global settings for hearth."""
    logging: LogSettings = Field(default_factory=LogSettings)
    default_factory: str = Field(
        default="default",
        description="Connection factory used when none is configured"
    )
    entry_point_group: Optional[str] = Field(
        default="hearth.connection_factories",
        description="Entry point group scanned for third-party factories"
    )


settings = Settings()
