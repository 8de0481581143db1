"""
modkernel - Test Configuration

Pytest fixtures shared by all tests.
"""
from typing import Any, Callable, List, Tuple

import pytest

from modkernel.kernel.descriptor import ModuleDefinition
from modkernel.kernel.orchestrator import ModuleOrchestrator
from modkernel.kernel.telemetry import TelemetryRecorder


class RoutingStub:
    """Minimal routing capability that records what modules mount."""

    def __init__(self) -> None:
        self.routes: List[Tuple[str, str, Callable]] = []
        self.middlewares: List[Callable] = []

    def get(self, path, handler):
        self.routes.append(("GET", path, handler))

    def post(self, path, handler):
        self.routes.append(("POST", path, handler))

    def put(self, path, handler):
        self.routes.append(("PUT", path, handler))

    def delete(self, path, handler):
        self.routes.append(("DELETE", path, handler))

    def use(self, middleware):
        self.middlewares.append(middleware)

    async def listen(self, *args, **kwargs):
        return None


@pytest.fixture
def recorder() -> TelemetryRecorder:
    """Telemetry collaborator that keeps every event."""
    return TelemetryRecorder()


@pytest.fixture
def orchestrator(recorder) -> ModuleOrchestrator:
    """Fresh orchestrator per test, no shared state."""
    return ModuleOrchestrator(telemetry=recorder)


@pytest.fixture
def routing_stub() -> RoutingStub:
    return RoutingStub()


@pytest.fixture
def calls() -> List[str]:
    """Ordered log of lifecycle calls made by test modules."""
    return []


@pytest.fixture
def make_module(calls) -> Callable[..., ModuleDefinition]:
    """Factory for modules that append "init:<id>" / "shutdown:<id>" to calls."""

    def factory(
        module_id: str,
        dependencies: Tuple[str, ...] = (),
        services: Any = None,
        fail_init: bool = False,
        fail_shutdown: bool = False,
        routes: Any = None,
    ) -> ModuleDefinition:
        async def initialize(context):
            calls.append(f"init:{module_id}")
            if fail_init:
                raise RuntimeError(f"{module_id} exploded")

        def shutdown(context):
            calls.append(f"shutdown:{module_id}")
            if fail_shutdown:
                raise RuntimeError(f"{module_id} refused to stop")

        return ModuleDefinition(
            id=module_id,
            display_name=f"{module_id.title()} Module",
            dependencies=dependencies,
            initialize=initialize,
            shutdown=shutdown,
            routes=routes,
            services=services if services is not None else {"name": lambda: module_id},
        )

    return factory
