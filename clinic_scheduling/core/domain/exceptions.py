"""
Domain Exceptions for Domain-Driven Design

These exceptions represent business rule violations and domain-specific errors.
Application services catch them and translate them into reason codes.
"""

from typing import Any


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    Provides a standardized way to communicate business rule violations.
    """

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "SLOT_ALREADY_BOOKED")
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class EntityNotFoundException(DomainException):
    """
    Raised when an entity is not found.
    """

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        message: str | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        msg = message or f"{entity_type} with ID {entity_id} not found"
        super().__init__(
            msg,
            "ENTITY_NOT_FOUND",
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class InvalidOperationException(DomainException):
    """Raised when an operation is not valid in the current state."""

    def __init__(
        self,
        operation: str,
        current_state: str,
        message: str | None = None,
        code: str = "INVALID_OPERATION",
    ):
        self.operation = operation
        self.current_state = current_state
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(
            msg,
            code,
            {"operation": operation, "current_state": current_state},
        )


class InvalidStateTransitionException(InvalidOperationException):
    """Raised when a status transition is not in the transition table."""

    def __init__(self, current_state: str, target_state: str):
        self.target_state = target_state
        super().__init__(
            operation=f"transition to '{target_state}'",
            current_state=current_state,
            message=f"Cannot move appointment from '{current_state}' to '{target_state}'",
            code="INVALID_STATE_TRANSITION",
        )


class AlreadyTerminalException(InvalidOperationException):
    """Raised when a transition is applied to a finished appointment."""

    def __init__(self, current_state: str, target_state: str):
        self.target_state = target_state
        super().__init__(
            operation=f"transition to '{target_state}'",
            current_state=current_state,
            message=f"Appointment is already '{current_state}' and cannot change anymore",
            code="ALREADY_TERMINAL",
        )


class AppointmentNotStartedException(InvalidOperationException):
    """Raised when a no-show is recorded before the appointment start."""

    def __init__(self, current_state: str):
        super().__init__(
            operation="mark_no_show",
            current_state=current_state,
            message="A no-show can only be recorded after the appointment start time",
            code="APPOINTMENT_NOT_STARTED",
        )


class IntegrationException(DomainException):
    """Raised when an external integration fails."""

    def __init__(self, service: str, message: str, original_error: Exception | None = None):
        self.service = service
        self.original_error = original_error
        details: dict[str, Any] = {"service": service}
        if original_error:
            details["original_error"] = str(original_error)
        super().__init__(message, "INTEGRATION_ERROR", details)


class RepositoryUnavailableException(IntegrationException):
    """
    Raised when a data store or cache cannot be reached.

    This is an infrastructure failure, never a scheduling decision;
    use cases let it propagate unchanged.
    """

    def __init__(self, service: str, operation: str, original_error: Exception | None = None):
        self.operation = operation
        super().__init__(
            service=service,
            message=f"{service} unavailable during '{operation}'",
            original_error=original_error,
        )
        self.code = "REPOSITORY_UNAVAILABLE"
        self.details["operation"] = operation


class AppointmentConflictException(DomainException):
    """Raised when there's a scheduling conflict."""

    def __init__(
        self,
        doctor_id: int | None = None,
        time_slot: str | None = None,
        message: str | None = None,
    ):
        self.doctor_id = doctor_id
        self.time_slot = time_slot
        msg = message or "Appointment conflict: time slot not available"
        details: dict[str, Any] = {}
        if doctor_id:
            details["doctor_id"] = doctor_id
        if time_slot:
            details["time_slot"] = time_slot
        super().__init__(msg, "SLOT_ALREADY_BOOKED", details)
