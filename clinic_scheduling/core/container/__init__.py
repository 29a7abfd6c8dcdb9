"""
Dependency Injection Container.

Wires concrete repositories, caches and clocks to the scheduling use cases.
"""

from clinic_scheduling.core.container.scheduling import SchedulingContainer

__all__ = ["SchedulingContainer"]
