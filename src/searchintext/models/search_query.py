"""
Search configuration model for searchintext.

This module defines the immutable input of a single search: where to look,
what to look for, and the limits the engine runs under.
"""

from typing import Dict, Any, Optional
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import (
    SearchSettings,
    DEFAULT_MAX_BYTES_PER_FILE,
    DEFAULT_MAX_WORKERS,
    DEFAULT_RESULT_BUFFER,
)


class SearchConfig(BaseModel):
    """
    Represents one search invocation.

    The model is frozen: it is built once before the walk starts and only
    read afterwards. Existence of the root path is not checked here; that is
    the job of the path probe, so that a missing root is reported as a
    configuration error by the engine rather than as a validation error.

    Attributes:
        root_path: Directory (or file) to search
        keyword: Literal, case-sensitive substring to look for
        verbose: Report non-matching entries and soft errors
        size_ceiling_bytes: Files of this size or larger are name-matched only
        max_workers: Worker threads running match tasks
        result_buffer: Capacity of the result queue
    """

    model_config = ConfigDict(frozen=True)

    root_path: str = Field(..., min_length=1, description="Root path to search")
    keyword: str = Field(..., min_length=1, description="Keyword to search for")
    verbose: bool = Field(False, description="Report every visited entry")
    size_ceiling_bytes: int = Field(DEFAULT_MAX_BYTES_PER_FILE, gt=0, description="Content search size ceiling")
    max_workers: int = Field(DEFAULT_MAX_WORKERS, gt=0, le=512, description="Worker threads")
    result_buffer: int = Field(DEFAULT_RESULT_BUFFER, gt=0, description="Result queue capacity")

    @field_validator('root_path')
    @classmethod
    def validate_root_path(cls, v: str) -> str:
        """Normalize the root path to an absolute path."""
        if not v.strip():
            raise ValueError("Root path cannot be empty")
        return str(Path(v).expanduser().absolute())

    @field_validator('keyword')
    @classmethod
    def validate_keyword(cls, v: str) -> str:
        """Reject empty keywords; whitespace is significant and kept."""
        if not v:
            raise ValueError("Keyword cannot be empty")
        return v

    @property
    def keyword_bytes(self) -> bytes:
        """Keyword encoded for byte-level content matching."""
        return self.keyword.encode('utf-8')

    @classmethod
    def from_settings(
        cls,
        root_path: str,
        keyword: str,
        settings: Optional[SearchSettings] = None,
        **overrides: Any,
    ) -> 'SearchConfig':
        """
        Build a config from persisted settings plus per-run values.

        Args:
            root_path: Root path to search
            keyword: Keyword to search for
            settings: Settings loaded from file (defaults if None)
            **overrides: Explicit values (e.g. from CLI flags); None values are ignored

        Returns:
            A validated SearchConfig
        """
        settings = settings or SearchSettings()
        data: Dict[str, Any] = {
            'root_path': root_path,
            'keyword': keyword,
            'verbose': settings.output.verbose,
            'size_ceiling_bytes': settings.limits.max_bytes_per_file,
            'max_workers': settings.limits.max_workers,
            'result_buffer': settings.limits.result_buffer,
        }
        data.update({key: value for key, value in overrides.items() if value is not None})
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()

    def __str__(self) -> str:
        return f"Keyword: '{self.keyword}' | Path: {self.root_path} | Verbose: {self.verbose}"
