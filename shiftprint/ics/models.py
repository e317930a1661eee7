"""Data models for ICS calendar processing."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RawOccurrence(BaseModel):
    """One concrete calendar occurrence after recurrence expansion."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Occurrence ID (source UID plus start timestamp)")
    summary: str = Field(..., description="Free-text event title, e.g. 'John Doe - Morning Shift'")
    start: datetime = Field(..., description="Occurrence start")
    end: datetime = Field(..., description="Occurrence end")
    location: Optional[str] = Field(default=None, description="Event location")
    description: Optional[str] = Field(default=None, description="Event description")
    color: Optional[str] = Field(default=None, description="COLOR property, if present")
    source_uid: str = Field(..., description="UID of the VEVENT this occurrence came from")
    recurrence_id: Optional[datetime] = Field(
        default=None, description="RECURRENCE-ID of an overridden instance"
    )
    is_exception: bool = Field(default=False, description="Built from a RECURRENCE-ID override")
    is_deleted: bool = Field(default=False, description="Excluded occurrence marker")

    @property
    def duration_minutes(self) -> int:
        """Length of the occurrence in whole minutes."""
        return int((self.end - self.start).total_seconds() // 60)


class ICSParseResult(BaseModel):
    """Result of ICS parsing operation."""

    occurrences: list[RawOccurrence] = Field(default_factory=list)
    calendar_name: Optional[str] = None
    timezone: Optional[str] = None

    # Parse statistics
    event_count: int = 0
    recurring_event_count: int = 0
    exception_count: int = 0
    single_event_count: int = 0
    skipped_event_count: int = 0

    warnings: list[str] = Field(default_factory=list)
    parse_time: datetime = Field(default_factory=datetime.now)

    def add_warning(self, warning: str) -> None:
        """Add a warning message."""
        self.warnings.append(warning)


class ICSSource(BaseModel):
    """Configuration for a remote ICS calendar source."""

    url: str = Field(..., description="ICS calendar URL")
    timeout: int = Field(default=30, description="HTTP timeout in seconds")
    custom_headers: dict[str, str] = Field(default_factory=dict, description="Custom HTTP headers")


class ICSResponse(BaseModel):
    """Response from ICS fetch operation."""

    success: bool
    content: Optional[str] = None
    status_code: Optional[int] = None
    headers: dict[str, str] = Field(default_factory=dict)
    error_message: Optional[str] = None
    fetch_time: datetime = Field(default_factory=datetime.now)

    @property
    def content_length(self) -> Optional[int]:
        """Get content length if available."""
        if self.content:
            return len(self.content.encode("utf-8"))
        return None
