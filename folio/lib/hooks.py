"""Page lifecycle hooks.

Actions are callbacks run for their side effects at a lifecycle point; filters
receive a value, may replace it, and hand it to the next filter. Callbacks can
be plain functions or coroutines and run in ascending priority, ties in
registration order.

Usage:
    from folio.lib.hooks import hooks, action, AFTER_PUBLISH

    @action(AFTER_PUBLISH)
    async def purge_cdn(owner_id):
        ...

    await hooks.do_action(AFTER_PUBLISH, owner_id)
    sections = await hooks.apply_filters(COMPOSED_SECTIONS, sections, config)
"""

import bisect
import inspect
import itertools
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PRIORITY = 10

_registration_order = itertools.count()


@dataclass(frozen=True, order=True)
class HookHandler:
    priority: int
    sequence: int
    callback: Callable[..., Any] = field(compare=False)

    async def __call__(self, *args: Any, **kwargs: Any) -> Any:
        result = self.callback(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result


class HookRegistry:
    """Named action and filter tables."""

    def __init__(self) -> None:
        self._actions: dict[str, list[HookHandler]] = defaultdict(list)
        self._filters: dict[str, list[HookHandler]] = defaultdict(list)

    @staticmethod
    def _register(table: dict[str, list[HookHandler]], hook_name: str, callback: Callable, priority: int) -> None:
        bisect.insort(table[hook_name], HookHandler(priority, next(_registration_order), callback))

    @staticmethod
    def _unregister(table: dict[str, list[HookHandler]], hook_name: str, callback: Callable) -> bool:
        handlers = table.get(hook_name)
        if not handlers:
            return False
        for handler in handlers:
            if handler.callback is callback:
                handlers.remove(handler)
                return True
        return False

    def add_action(self, hook_name: str, callback: Callable[..., Any], priority: int = DEFAULT_PRIORITY) -> None:
        self._register(self._actions, hook_name, callback, priority)

    def add_filter(self, hook_name: str, callback: Callable[..., Any], priority: int = DEFAULT_PRIORITY) -> None:
        self._register(self._filters, hook_name, callback, priority)

    def remove_action(self, hook_name: str, callback: Callable[..., Any]) -> bool:
        """Unregister ``callback``; False when it was not registered."""
        return self._unregister(self._actions, hook_name, callback)

    def remove_filter(self, hook_name: str, callback: Callable[..., Any]) -> bool:
        return self._unregister(self._filters, hook_name, callback)

    def has_action(self, hook_name: str) -> bool:
        return bool(self._actions.get(hook_name))

    def has_filter(self, hook_name: str) -> bool:
        return bool(self._filters.get(hook_name))

    async def do_action(self, hook_name: str, *args: Any, **kwargs: Any) -> None:
        """Run every action registered under ``hook_name``.

        Exceptions from a callback propagate and stop the remaining callbacks.
        """
        handlers = tuple(self._actions.get(hook_name, ()))
        if handlers:
            logger.debug("Running %d action(s) for %s", len(handlers), hook_name)
        for handler in handlers:
            await handler(*args, **kwargs)

    async def apply_filters(self, hook_name: str, value: T, *args: Any, **kwargs: Any) -> T:
        """Thread ``value`` through every filter registered under ``hook_name``.

        Extra arguments are passed to each filter after the value.
        """
        for handler in tuple(self._filters.get(hook_name, ())):
            value = await handler(value, *args, **kwargs)
        return value

    def clear(self) -> None:
        self._actions.clear()
        self._filters.clear()


hooks = HookRegistry()


def action(hook_name: str, priority: int = DEFAULT_PRIORITY) -> Callable[[Callable], Callable]:
    """Register the decorated function as an action on the global registry."""

    def decorator(func: Callable) -> Callable:
        hooks.add_action(hook_name, func, priority)
        return func

    return decorator


def filter(hook_name: str, priority: int = DEFAULT_PRIORITY) -> Callable[[Callable], Callable]:
    """Register the decorated function as a filter on the global registry."""

    def decorator(func: Callable) -> Callable:
        hooks.add_filter(hook_name, func, priority)
        return func

    return decorator


# Actions: (page) on first creation, (owner_id, config) around draft saves,
# (owner_id) around publishes
AFTER_PAGE_CREATE = "after_page_create"
BEFORE_DRAFT_SAVE = "before_draft_save"
AFTER_DRAFT_SAVE = "after_draft_save"
BEFORE_PUBLISH = "before_publish"
AFTER_PUBLISH = "after_publish"

# Filters: (list[ComposedSection], config) before a page is rendered to HTML
COMPOSED_SECTIONS = "composed_sections"
