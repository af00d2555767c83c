"""
Hook dispatcher coordinating lifecycle events.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

HookHandler = Callable[..., None]

LIFECYCLE_EVENTS = (
    "before_save",
    "after_save",
    "before_insert",
    "after_insert",
    "before_update",
    "after_update",
    "before_delete",
    "after_delete",
)


class HookDispatcher:
    """
    Runs lifecycle events for saved and deleted structures.

    An event first calls the same-named method on the instance, when defined,
    then any handlers registered for the event globally or for the instance's
    class. Exceptions propagate and abort the surrounding operation.
    """

    def __init__(self) -> None:
        self._global_handlers: Dict[str, List[HookHandler]] = defaultdict(list)
        self._model_handlers: Dict[type, Dict[str, List[HookHandler]]] = defaultdict(
            lambda: defaultdict(list)
        )

    def register(self, event: str, handler: HookHandler, *, model: Optional[type] = None) -> None:
        if event not in LIFECYCLE_EVENTS:
            raise ValueError(f"Unknown lifecycle event '{event}'")
        if model:
            self._model_handlers[model][event].append(handler)
        else:
            self._global_handlers[event].append(handler)

    def fire(self, event: str, instance: Any, **context: Any) -> None:
        method = getattr(instance, event, None)
        if callable(method):
            method()
        handlers = list(self._global_handlers.get(event, []))
        handlers.extend(self._model_handlers.get(type(instance), {}).get(event, []))
        for handler in handlers:
            handler(instance, **context)

    def clear(self) -> None:
        self._global_handlers.clear()
        self._model_handlers.clear()
