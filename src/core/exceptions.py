"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class InvalidTransitionException(DomainException):
    """Exception when a complaint cannot move to the requested status."""

    def __init__(
        self,
        complaint_id: str,
        current_status: str,
        target_status: str,
        details: Optional[dict] = None
    ):
        self.complaint_id = complaint_id
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            f"Complaint {complaint_id} cannot move from '{current_status}' to '{target_status}'",
            details or {
                "complaint_id": complaint_id,
                "current_status": current_status,
                "target_status": target_status,
            }
        )


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class AuthenticationException(ApplicationException):
    """Exception when the caller could not be identified."""


class AuthorizationException(ApplicationException):
    """Exception when the caller lacks permission for an action."""

    def __init__(
        self,
        action: str,
        actor_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.action = action
        self.actor_id = actor_id
        super().__init__(
            f"Not allowed to {action}",
            details or {"action": action, "actor_id": actor_id}
        )


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""
