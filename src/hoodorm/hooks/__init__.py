"""
Lifecycle hooks for hoodorm structures.
"""

from .dispatcher import LIFECYCLE_EVENTS, HookDispatcher

__all__ = ["HookDispatcher", "LIFECYCLE_EVENTS"]
