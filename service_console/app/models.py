"""
Payload models read by the console pages.

The gateway never parses these; only the console does.
"""

from datetime import datetime
from enum import Enum
from typing import Any, List

from pydantic import BaseModel, Field, field_validator


class Severity(str, Enum):
    """Triage severity levels, ordered low < medium < high."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AlertStatus(str, Enum):
    """Alert lifecycle states owned by the upstream."""
    PENDING = "pending"
    AWAITING_APPROVAL = "awaiting_approval"
    ACTION_EXECUTED = "action_executed"
    REVIEWED = "reviewed"


class Event(BaseModel):
    """A raw observed occurrence."""
    id: str
    event_type: str
    principal: str
    target: str
    network: str
    severity_hint: str
    labels: List[str] = Field(default_factory=list)
    description: str
    ts: datetime

    @field_validator("labels", mode="before")
    @classmethod
    def _null_labels(cls, value: Any) -> Any:
        return [] if value is None else value


class Triage(BaseModel):
    """Classification attached to an event."""
    severity: Severity
    confidence: float = Field(..., ge=0.0, le=1.0)
    reason_tokens: List[str] = Field(default_factory=list)

    @field_validator("reason_tokens", mode="before")
    @classmethod
    def _null_reasons(cls, value: Any) -> Any:
        return [] if value is None else value


class Alert(BaseModel):
    """An event, its triage and its lifecycle status."""
    alert_id: str
    event: Event
    triage: Triage
    status: AlertStatus
    created: datetime

    @property
    def needs_approval(self) -> bool:
        return self.status == AlertStatus.AWAITING_APPROVAL


class AlertsResponse(BaseModel):
    """Body of the alert list endpoint."""
    alerts: List[Alert] = Field(default_factory=list)

    @field_validator("alerts", mode="before")
    @classmethod
    def _null_alerts(cls, value: Any) -> Any:
        # the upstream encodes an empty list as null
        return [] if value is None else value


class MetricsCounts(BaseModel):
    """Counts keyed by severity and by status."""
    Low: int = 0
    Med: int = 0
    High: int = 0
    Awaiting: int = 0
    Executed: int = 0
    Pending: int = 0


class MetricsSnapshot(BaseModel):
    """Aggregate counts and the sample window they cover."""
    sample_window: int
    counts: MetricsCounts


class ApprovalResult(BaseModel):
    """Outcome of an approval call as shown next to the approve button."""
    ok: bool
    status_code: int
    message: str
