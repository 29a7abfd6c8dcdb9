"""
Domain Layer - Core DDD building blocks

This module provides base classes for Domain-Driven Design:
- Entities: Objects with identity and lifecycle
- Value Objects: Immutable objects compared by value
- Events: Domain events returned to callers
- Exceptions: Domain-specific error handling
"""

from clinic_scheduling.core.domain.entities import (
    AggregateRoot,
    Entity,
    SoftDeletableEntity,
)
from clinic_scheduling.core.domain.events import DomainEvent
from clinic_scheduling.core.domain.exceptions import (
    AlreadyTerminalException,
    AppointmentConflictException,
    AppointmentNotStartedException,
    DomainException,
    EntityNotFoundException,
    IntegrationException,
    InvalidOperationException,
    InvalidStateTransitionException,
    RepositoryUnavailableException,
)
from clinic_scheduling.core.domain.value_objects import (
    StatusEnum,
    ValueObject,
)

__all__ = [
    # Entities
    "Entity",
    "AggregateRoot",
    "SoftDeletableEntity",
    # Value Objects
    "ValueObject",
    "StatusEnum",
    # Events
    "DomainEvent",
    # Exceptions
    "DomainException",
    "EntityNotFoundException",
    "InvalidOperationException",
    "InvalidStateTransitionException",
    "AlreadyTerminalException",
    "AppointmentNotStartedException",
    "IntegrationException",
    "RepositoryUnavailableException",
    "AppointmentConflictException",
]
