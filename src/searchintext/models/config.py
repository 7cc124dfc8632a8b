"""
Configuration data models for searchintext.

This module defines the persisted settings that shape a search run: resource
limits for the worker pool and size ceiling, and output preferences for the
reporting layer.
"""

from typing import Dict, List, Any
from enum import Enum
from pydantic import BaseModel, Field, field_validator


# 100 MiB; files this size or larger are matched by name only
DEFAULT_MAX_BYTES_PER_FILE = 100 * 1024 * 1024
DEFAULT_MAX_WORKERS = 8
DEFAULT_RESULT_BUFFER = 1024


class OutputFormat(Enum):
    """Supported log output formats."""
    TEXT = "text"
    JSON = "json"


class LimitsConfig(BaseModel):
    """
    Configuration for resource limits.

    Attributes:
        max_bytes_per_file: Size ceiling; files at or above it are name-matched only
        max_workers: Number of worker threads running match tasks
        result_buffer: Capacity of the result queue between workers and consumer
    """

    max_bytes_per_file: int = Field(DEFAULT_MAX_BYTES_PER_FILE, gt=0, description="Size ceiling in bytes")
    max_workers: int = Field(DEFAULT_MAX_WORKERS, gt=0, le=512, description="Worker threads for match tasks")
    result_buffer: int = Field(DEFAULT_RESULT_BUFFER, gt=0, description="Result queue capacity")

    def get_max_size_human_readable(self) -> str:
        """Get the size ceiling in human-readable format."""
        size = float(self.max_bytes_per_file)
        for unit in ['B', 'KB', 'MB', 'GB']:
            if size < 1024.0:
                return f"{size:.1f} {unit}"
            size /= 1024.0
        return f"{size:.1f} TB"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = self.model_dump()
        data['max_size_human'] = self.get_max_size_human_readable()
        return data


class OutputConfig(BaseModel):
    """
    Configuration for output and logging.

    Attributes:
        format: Log record format (plain text or JSON)
        verbose: Whether non-matching entries and soft errors are reported
        log_level: Root logging level name
    """

    format: OutputFormat = Field(OutputFormat.TEXT, description="Log output format")
    verbose: bool = Field(False, description="Report every visited entry")
    log_level: str = Field("INFO", description="Root logging level")

    @field_validator('format', mode='before')
    @classmethod
    def validate_format(cls, v) -> OutputFormat:
        """Validate and convert format to enum."""
        if isinstance(v, str):
            try:
                return OutputFormat(v.lower())
            except ValueError:
                raise ValueError(f"Invalid output format: {v}")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the level name and reject unknown levels."""
        level = v.strip().upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f"Invalid log level: {v}")
        return level

    def is_json(self) -> bool:
        return self.format == OutputFormat.JSON

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = self.model_dump()
        data['format'] = self.format.value
        return data


class SearchSettings(BaseModel):
    """
    Persisted settings for searchintext.

    These are the values a settings file may provide. Per-run inputs (root
    path and keyword) are not part of it and come from the command line.

    Attributes:
        limits: Resource limits
        output: Output and logging preferences
    """

    limits: LimitsConfig = Field(default_factory=LimitsConfig, description="Resource limits")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Output preferences")

    def validate_configuration(self) -> List[str]:
        """
        Check settings for values that are legal but likely to cause trouble.

        Returns:
            List of warning messages (empty if nothing looks suspicious)
        """
        warnings = []

        if self.limits.max_bytes_per_file > 1024 * 1024 * 1024:
            warnings.append(
                f"Very high max_bytes_per_file ({self.limits.get_max_size_human_readable()}) "
                f"- files are read fully into memory"
            )

        if self.limits.max_workers > 64:
            warnings.append(f"High max_workers ({self.limits.max_workers}) may exhaust file descriptors")

        if self.limits.result_buffer < self.limits.max_workers:
            warnings.append("result_buffer smaller than max_workers will serialize workers on the consumer")

        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'limits': self.limits.to_dict(),
            'output': self.output.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SearchSettings':
        """Create settings from a dictionary, ignoring derived keys."""
        limits = dict(data.get('limits') or {})
        limits.pop('max_size_human', None)
        return cls.model_validate({
            'limits': limits,
            'output': data.get('output') or {},
        })

    def __str__(self) -> str:
        return (
            f"SearchSettings(max_size={self.limits.get_max_size_human_readable()}, "
            f"workers={self.limits.max_workers}, format={self.output.format.value}, "
            f"verbose={self.output.verbose})"
        )


KNOWN_SECTIONS = ('limits', 'output')


def validate_config_dict(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate the shape of a raw settings dictionary.

    Args:
        config_data: Raw settings as loaded from YAML

    Returns:
        The same data, with missing sections filled in as empty mappings

    Raises:
        ValueError: If an unknown section is present or a section is not a mapping
    """
    unknown = [key for key in config_data if key not in KNOWN_SECTIONS]
    if unknown:
        raise ValueError(f"Unknown configuration section(s): {', '.join(sorted(unknown))}")

    validated = {}
    for section in KNOWN_SECTIONS:
        value = config_data.get(section)
        if value is None:
            value = {}
        if not isinstance(value, dict):
            raise ValueError(f"Section '{section}' must be a mapping, got {type(value).__name__}")
        validated[section] = value

    return validated
