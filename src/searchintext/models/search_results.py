"""
Search result data models for searchintext.

This module defines the facts emitted while a search runs (one MatchResult
per name check or content check) and the aggregate figures produced when
it finishes.
"""

from typing import Dict, Any, Optional
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, model_validator


class MatchKind(Enum):
    """Which check produced a result."""
    NAME = "name"
    CONTENT = "content"


class MatchResult(BaseModel):
    """
    One emitted fact about a single filesystem entry.

    Attributes:
        path: Location of the entry
        name: Base name of the entry
        is_directory: Whether the entry is a directory
        matched: Whether the keyword was found
        kind: Check that produced this result
        size: Entry size in bytes at visit time
        modified_time: Modification time at visit time
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="Location of the entry")
    name: str = Field(..., description="Base name of the entry")
    is_directory: bool = Field(..., description="Whether the entry is a directory")
    matched: bool = Field(..., description="Whether the keyword was found")
    kind: MatchKind = Field(MatchKind.NAME, description="Check that produced this result")
    size: Optional[int] = Field(None, ge=0, description="Size in bytes")
    modified_time: Optional[datetime] = Field(None, description="Modification time")

    @model_validator(mode='after')
    def validate_kind(self):
        """Directories have no content to match."""
        if self.is_directory and self.kind == MatchKind.CONTENT:
            raise ValueError("Content results cannot describe a directory")
        return self

    @property
    def entry_type(self) -> str:
        return "folder" if self.is_directory else "file"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = self.model_dump()
        data['kind'] = self.kind.value
        if self.modified_time:
            data['modified_time'] = self.modified_time.isoformat()
        return data


class SearchCounters(BaseModel):
    """
    Snapshot of the four search statistics.

    Attributes:
        files_visited: Files enumerated under the root
        folders_visited: Directories enumerated under the root
        files_matched: Distinct files whose name or content matched
        folders_matched: Directories whose name matched
    """

    model_config = ConfigDict(frozen=True)

    files_visited: int = Field(0, ge=0)
    folders_visited: int = Field(0, ge=0)
    files_matched: int = Field(0, ge=0)
    folders_matched: int = Field(0, ge=0)

    @property
    def entries_visited(self) -> int:
        return self.files_visited + self.folders_visited

    def to_dict(self) -> Dict[str, int]:
        return self.model_dump()


class SearchSummary(BaseModel):
    """
    Final outcome of a completed search.

    Attributes:
        root_path: Root that was searched
        keyword: Keyword that was searched for
        counters: Final statistics
        elapsed_seconds: Wall-clock duration of the search
    """

    root_path: str
    keyword: str
    counters: SearchCounters = Field(default_factory=SearchCounters)
    elapsed_seconds: float = Field(0.0, ge=0.0)

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump()
        data['counters'] = self.counters.to_dict()
        return data
