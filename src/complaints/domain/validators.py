"""
Complaint Validators
=====================

Field checks applied before a complaint is created.

Every check raises ValidationException so that nothing is persisted
(and no attachment is written) when input is invalid.
"""

from typing import Optional, Sequence

from src.config import VALID_CATEGORIES, VALID_PRIORITIES, Priority
from src.core import ValidationException

MAX_IMAGES = 5


def require_text(value: Optional[str], field_name: str) -> str:
    """Return the stripped value, rejecting missing or blank text."""
    if value is None or not str(value).strip():
        raise ValidationException(f"{field_name} is required", {"field": field_name})
    return str(value).strip()


def validate_category(category: Optional[str]) -> str:
    if category not in VALID_CATEGORIES:
        raise ValidationException(
            f"Unknown category '{category}'",
            {"field": "category", "allowed": list(VALID_CATEGORIES)}
        )
    return category


def validate_priority(priority: Optional[str]) -> str:
    if priority is None:
        return Priority.MEDIUM
    if priority not in VALID_PRIORITIES:
        raise ValidationException(
            f"Unknown priority '{priority}'",
            {"field": "priority", "allowed": list(VALID_PRIORITIES)}
        )
    return priority


def validate_image_count(images: Sequence, max_images: int = MAX_IMAGES) -> None:
    """Reject more attachments than allowed instead of truncating."""
    if len(images) > max_images:
        raise ValidationException(
            f"At most {max_images} images may be attached, got {len(images)}",
            {"field": "images", "max": max_images, "count": len(images)}
        )


def validate_new_complaint(
    title: Optional[str],
    description: Optional[str],
    category: Optional[str],
    priority: Optional[str],
    room_number: Optional[str],
    images: Sequence = (),
    max_images: int = MAX_IMAGES
) -> dict:
    """
    Validate creation input.

    Returns:
        Normalized field values keyed by entity attribute name
    """
    validate_image_count(images, max_images)
    return {
        "title": require_text(title, "title"),
        "description": require_text(description, "description"),
        "category": validate_category(category),
        "priority": validate_priority(priority),
        "room_number": require_text(room_number, "roomNumber"),
    }
