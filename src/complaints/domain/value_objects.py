"""
Complaint Value Objects
========================

Immutable value objects for the SLA side of the complaint domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

from datetime import datetime, timedelta
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.config import DEFAULT_SLA_HOURS, VALID_CATEGORIES, ComplaintStatus
from src.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class SLAPolicy(BaseModel):
    """
    Per-category SLA thresholds loaded from YAML.

    A complaint is escalated once it has been unresolved for longer
    than the threshold of its category.
    """
    model_config = ConfigDict(frozen=True)

    category_sla_hours: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_SLA_HOURS),
        description="Hours before escalation, by category"
    )

    @field_validator("category_sla_hours")
    @classmethod
    def validate_category_sla_hours(cls, v: Dict[str, float]) -> Dict[str, float]:
        """Reject unknown categories and fill missing ones with defaults."""
        unknown = sorted(set(v) - set(VALID_CATEGORIES))
        if unknown:
            raise ValueError(f"unknown categories in SLA config: {unknown}")

        for category, hours in v.items():
            if hours <= 0:
                raise ValueError(f"SLA hours for '{category}' must be positive")

        merged = dict(DEFAULT_SLA_HOURS)
        merged.update(v)
        return merged

    def get_threshold_hours(self, category: str) -> Optional[float]:
        """Get the SLA threshold for a category, None if unknown."""
        return self.category_sla_hours.get(category)


class EscalationEvaluator:
    """
    Pure functions for escalation checks.

    Escalation depends on wall-clock time, so it is computed on every
    read and never stored on the complaint.
    """

    @staticmethod
    def hours_elapsed(created_at: datetime, now: datetime) -> float:
        """Hours between creation and `now`."""
        return (now - created_at).total_seconds() / 3600

    @staticmethod
    def is_escalated(complaint, now: datetime, policy: Optional[SLAPolicy] = None) -> bool:
        """
        Check whether a complaint has outlived its category's SLA.

        Args:
            complaint: Complaint entity (status, category, created_at)
            now: Evaluation instant
            policy: SLA thresholds, defaults when omitted

        Returns:
            True iff the complaint is unresolved and the elapsed hours
            strictly exceed the threshold
        """
        if complaint.status == ComplaintStatus.RESOLVED:
            return False

        policy = policy or DEFAULT_POLICY
        threshold = policy.get_threshold_hours(complaint.category)
        if threshold is None:
            logger.warning(
                "No SLA threshold for category, treating as not escalated",
                extra={"complaint_id": complaint.id, "category": complaint.category}
            )
            return False

        return EscalationEvaluator.hours_elapsed(complaint.created_at, now) > threshold

    @staticmethod
    def sla_deadline(complaint, policy: Optional[SLAPolicy] = None) -> Optional[datetime]:
        """Instant after which the complaint counts as escalated."""
        policy = policy or DEFAULT_POLICY
        threshold = policy.get_threshold_hours(complaint.category)
        if threshold is None:
            return None
        return complaint.created_at + timedelta(hours=threshold)


DEFAULT_POLICY = SLAPolicy()


def is_escalated(complaint, now: datetime, policy: Optional[SLAPolicy] = None) -> bool:
    """Shortcut for EscalationEvaluator.is_escalated."""
    return EscalationEvaluator.is_escalated(complaint, now, policy)
