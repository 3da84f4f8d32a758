"""Tests for the hook/filter registry."""

import pytest

from folio.lib.hooks import COMPOSED_SECTIONS, HookRegistry, action, filter


@pytest.fixture
def registry():
    """A fresh HookRegistry for each test."""
    return HookRegistry()


class TestHookRegistry:
    @pytest.mark.asyncio
    async def test_actions_run_in_priority_order(self, registry):
        call_order = []
        registry.add_action("publish", lambda owner_id: call_order.append(("late", owner_id)), priority=20)
        registry.add_action("publish", lambda owner_id: call_order.append(("early", owner_id)), priority=5)

        await registry.do_action("publish", "owner-1")

        assert call_order == [("early", "owner-1"), ("late", "owner-1")]

    @pytest.mark.asyncio
    async def test_filters_chain_values(self, registry):
        registry.add_filter("title", lambda value: value + "b", priority=20)
        registry.add_filter("title", lambda value: value + "a")

        assert await registry.apply_filters("title", "") == "ab"

    @pytest.mark.asyncio
    async def test_async_callbacks_are_awaited(self, registry):
        async def upper(value, suffix):
            return value.upper() + suffix

        registry.add_filter("title", upper)

        assert await registry.apply_filters("title", "page", "!") == "PAGE!"

    @pytest.mark.asyncio
    async def test_unregistered_hooks_are_no_ops(self, registry):
        await registry.do_action("missing")

        assert await registry.apply_filters("missing", 42) == 42

    def test_remove(self, registry):
        def handler():
            pass

        registry.add_action("a", handler)
        registry.add_filter("f", handler)

        assert registry.remove_action("a", handler) is True
        assert registry.remove_filter("f", handler) is True
        assert registry.remove_action("a", handler) is False
        assert not registry.has_action("a")
        assert not registry.has_filter("f")

    def test_clear(self, registry):
        registry.add_action("a", print)
        registry.add_filter("f", print)

        registry.clear()

        assert not registry.has_action("a")
        assert not registry.has_filter("f")


class TestDecorators:
    @pytest.mark.asyncio
    async def test_filter_decorator_registers_globally(self, clean_hooks):
        @filter(COMPOSED_SECTIONS)
        def drop_all(sections, config):
            return []

        assert await clean_hooks.apply_filters(COMPOSED_SECTIONS, ["x"], None) == []

    @pytest.mark.asyncio
    async def test_action_decorator_returns_function(self, clean_hooks):
        seen = []

        @action("custom", priority=1)
        def record(value):
            seen.append(value)

        await clean_hooks.do_action("custom", 3)

        assert seen == [3]
        assert record.__name__ == "record"
