"""
Complaint Analytics
====================

Aggregate metrics over an in-memory complaint collection.

Everything here is a pure function of the complaints and a single
evaluation instant, so one report never mixes two different "now"s.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from src.config import ComplaintStatus, VALID_CATEGORIES
from src.complaints.domain.entities import Complaint
from src.complaints.domain.value_objects import EscalationEvaluator, SLAPolicy

# Extra status filter value selecting unresolved, escalated complaints
ESCALATED_FILTER = "escalated"
ALL_FILTER = "all"


@dataclass
class AnalyticsSummary:
    """Dashboard metrics for a complaint collection."""
    total: int = 0
    open: int = 0
    in_progress: int = 0
    resolved: int = 0
    escalated: int = 0
    category_count: Dict[str, int] = field(
        default_factory=lambda: {category: 0 for category in VALID_CATEGORIES}
    )
    avg_response_time: float = 0.0
    resolution_rate: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "total": self.total,
            "open": self.open,
            "inProgress": self.in_progress,
            "resolved": self.resolved,
            "escalated": self.escalated,
            "categoryCount": dict(self.category_count),
            "avgResponseTime": self.avg_response_time,
            "resolutionRate": self.resolution_rate,
        }


def compute_analytics(
    complaints: Iterable[Complaint],
    now: Optional[datetime] = None,
    policy: Optional[SLAPolicy] = None
) -> AnalyticsSummary:
    """
    Compute summary metrics for a complaint collection.

    Args:
        complaints: Full collection, already loaded
        now: Evaluation instant shared by every escalation check
        policy: SLA thresholds

    Returns:
        AnalyticsSummary; all zeros for an empty collection
    """
    now = now or datetime.now(timezone.utc)
    summary = AnalyticsSummary()
    resolution_hours: List[float] = []

    for complaint in complaints:
        summary.total += 1

        if complaint.status == ComplaintStatus.OPEN:
            summary.open += 1
        elif complaint.status == ComplaintStatus.IN_PROGRESS:
            summary.in_progress += 1
        elif complaint.status == ComplaintStatus.RESOLVED:
            summary.resolved += 1
            if complaint.resolved_at is not None:
                resolution_hours.append(
                    EscalationEvaluator.hours_elapsed(complaint.created_at, complaint.resolved_at)
                )

        if complaint.category in summary.category_count:
            summary.category_count[complaint.category] += 1

        if EscalationEvaluator.is_escalated(complaint, now, policy):
            summary.escalated += 1

    if resolution_hours:
        summary.avg_response_time = sum(resolution_hours) / len(resolution_hours)
    if summary.total:
        summary.resolution_rate = summary.resolved / summary.total * 100

    return summary


def filter_complaints(
    complaints: Iterable[Complaint],
    status: str = ALL_FILTER,
    category: str = ALL_FILTER,
    now: Optional[datetime] = None,
    policy: Optional[SLAPolicy] = None
) -> List[Complaint]:
    """
    Filter complaints the way the complaints log does.

    `status` is a complaint status, "escalated" or "all";
    `category` is a category or "all". Input order is preserved.
    """
    now = now or datetime.now(timezone.utc)
    selected = []

    for complaint in complaints:
        if status == ESCALATED_FILTER:
            status_match = EscalationEvaluator.is_escalated(complaint, now, policy)
        else:
            status_match = status == ALL_FILTER or complaint.status == status

        category_match = category == ALL_FILTER or complaint.category == category

        if status_match and category_match:
            selected.append(complaint)

    return selected
