"""
Tests for lifecycle hooks.
"""
import pytest

from modkernel.kernel.context import ApplicationContext
from modkernel.kernel.errors import InitializationFailure
from modkernel.kernel.hooks import HookRegistry, LifecycleEvent


class TestHookRegistry:

    def test_string_and_enum_events_are_equivalent(self):
        hooks = HookRegistry()
        hooks.on("beforeInit", lambda ctx: None)
        hooks.on(LifecycleEvent.BEFORE_INIT, lambda ctx: None)

        assert hooks.count("beforeInit") == 2
        assert hooks.count() == 2

    def test_unknown_event_rejected(self):
        with pytest.raises(ValueError, match="Unknown lifecycle event"):
            HookRegistry().on("beforeEverything", lambda ctx: None)

    def test_non_callable_rejected(self):
        with pytest.raises(TypeError):
            HookRegistry().on("afterInit", "nope")

    def test_decorator_form_returns_function(self):
        hooks = HookRegistry()

        @hooks.on("afterAllInit")
        def ready(ctx):
            return None

        assert hooks.callbacks("afterAllInit") == [ready]

    @pytest.mark.asyncio
    async def test_fire_runs_sync_and_async_in_order(self):
        hooks = HookRegistry()
        order = []

        async def first(ctx):
            order.append("first")

        hooks.on("beforeShutdown", first)
        hooks.on("beforeShutdown", lambda ctx: order.append("second"))

        await hooks.fire("beforeShutdown", ApplicationContext())

        assert order == ["first", "second"]

    @pytest.mark.asyncio
    async def test_fire_propagates_errors(self):
        hooks = HookRegistry()

        def broken(ctx):
            raise RuntimeError("hook failed")

        hooks.on("afterShutdown", broken)

        with pytest.raises(RuntimeError):
            await hooks.fire("afterShutdown", ApplicationContext())


class TestHooksDuringRun:
    """Hook firing order across a full initialize/shutdown cycle."""

    @pytest.mark.asyncio
    async def test_full_lifecycle_order(self, orchestrator, make_module):
        fired = []
        for event in LifecycleEvent:
            orchestrator.on(
                event,
                lambda ctx, event=event: fired.append((event.value, ctx.module_name)),
            )

        orchestrator.register("logger", make_module("logger"))
        orchestrator.register("users", make_module("users", ("logger",)))

        context = await orchestrator.initialize_all()
        await orchestrator.shutdown_all(context)

        assert fired == [
            ("beforeAllInit", None),
            ("beforeInit", "logger"),
            ("afterInit", "logger"),
            ("beforeInit", "users"),
            ("afterInit", "users"),
            ("afterAllInit", None),
            ("beforeShutdown", None),
            ("afterShutdown", None),
        ]

    @pytest.mark.asyncio
    async def test_after_init_sees_published_services(self, orchestrator, make_module):
        seen = {}

        @orchestrator.on("afterInit")
        def capture(ctx):
            seen[ctx.module_name] = ctx.get_service(ctx.module_name) is not None

        orchestrator.register("a", make_module("a"))
        await orchestrator.initialize_all()

        assert seen == {"a": True}

    @pytest.mark.asyncio
    async def test_hooks_share_run_state(self, orchestrator, make_module):
        orchestrator.on("beforeAllInit", lambda ctx: ctx.set_state("started", True))
        orchestrator.register("a", make_module("a"))

        context = await orchestrator.initialize_all()

        assert context.get_state("started") is True

    @pytest.mark.asyncio
    async def test_hooks_not_fired_for_cached_dependency(self, orchestrator, make_module):
        fired = []
        orchestrator.on("beforeInit", lambda ctx: fired.append(ctx.module_name))
        orchestrator.register("logger", make_module("logger"))
        orchestrator.register("a", make_module("a", ("logger",)))
        orchestrator.register("b", make_module("b", ("logger",)))

        await orchestrator.initialize_all()

        assert fired == ["logger", "a", "b"]

    @pytest.mark.asyncio
    async def test_failing_before_init_hook_aborts_module(self, orchestrator, make_module, calls):
        def veto(ctx):
            raise PermissionError("not allowed")

        orchestrator.on("beforeInit", veto)
        orchestrator.register("a", make_module("a"))

        with pytest.raises(InitializationFailure) as exc_info:
            await orchestrator.initialize_all()

        assert exc_info.value.module_name == "a"
        assert isinstance(exc_info.value.cause, PermissionError)
        assert calls == []
