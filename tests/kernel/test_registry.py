"""
Tests for module definitions and the module registry.
"""
import pytest

from modkernel.kernel.descriptor import Capability, ModuleDefinition
from modkernel.kernel.errors import ErrorKind, InvalidModule
from modkernel.kernel.registry import ModuleRegistry
from modkernel.kernel.telemetry import TelemetryKind, TelemetryRecorder


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def registry(recorder):
    return ModuleRegistry(telemetry=recorder)


def _definition(module_id="a", **kwargs):
    return ModuleDefinition(id=module_id, display_name=f"{module_id} module", **kwargs)


# =============================================================================
# DEFINITION TESTS
# =============================================================================

class TestModuleDefinition:
    """Tests for the capability descriptor."""

    def test_capabilities_derived_from_fields(self):
        definition = _definition(
            initialize=lambda ctx: None,
            services={"ping": lambda: "pong"},
        )

        assert definition.has(Capability.INITIALIZE)
        assert definition.has(Capability.SERVICES)
        assert not definition.has(Capability.ROUTES)
        assert not definition.has(Capability.SHUTDOWN)

    def test_bare_module_has_no_capabilities(self):
        assert _definition().capabilities == Capability.NONE

    def test_dependencies_are_frozen_into_tuple(self):
        deps = ["logger", "db"]
        definition = _definition(dependencies=deps)
        deps.append("mutated")

        assert definition.dependencies == ("logger", "db")

    def test_string_dependencies_rejected(self):
        with pytest.raises(InvalidModule):
            _definition(dependencies="logger")

    def test_from_mapping_accepts_name_as_display_name(self):
        definition = ModuleDefinition.from_mapping(
            {"id": "auth", "name": "Authentication Module", "dependencies": ["logger"]}
        )

        assert definition.id == "auth"
        assert definition.display_name == "Authentication Module"
        assert definition.dependencies == ("logger",)

    def test_from_object_reads_attributes(self):
        class Plain:
            id = "plain"
            display_name = "Plain Module"
            services = {"x": 1}

        definition = ModuleDefinition.from_object(Plain())

        assert definition.id == "plain"
        assert definition.services == {"x": 1}

    def test_validate_rejects_non_callable_initialize(self):
        definition = _definition(initialize="not callable")

        with pytest.raises(InvalidModule) as exc_info:
            definition.validate()

        assert exc_info.value.kind == ErrorKind.INVALID_MODULE
        assert exc_info.value.module_name == "a"

    def test_validate_rejects_non_mapping_services(self):
        with pytest.raises(InvalidModule):
            _definition(services=[lambda: None]).validate()


# =============================================================================
# REGISTRY TESTS
# =============================================================================

class TestModuleRegistry:
    """Tests for register / get / list_all."""

    def test_register_and_get(self, registry):
        definition = _definition()

        assert registry.register("a", definition) is definition
        assert registry.get("a") is definition
        assert "a" in registry
        assert len(registry) == 1

    def test_get_missing_returns_none(self, registry):
        assert registry.get("ghost") is None

    @pytest.mark.parametrize("name", ["", None, 42])
    def test_invalid_name_rejected(self, registry, name):
        with pytest.raises(InvalidModule):
            registry.register(name, _definition())

    def test_missing_definition_rejected(self, registry):
        with pytest.raises(InvalidModule):
            registry.register("a", None)

    def test_definition_without_identity_rejected(self, registry):
        with pytest.raises(InvalidModule):
            registry.register("a", {"name": "No id"})
        with pytest.raises(InvalidModule):
            registry.register("a", {"id": "a"})

    def test_wrong_definition_type_rejected(self, registry):
        with pytest.raises(InvalidModule):
            registry.register("a", object())

    def test_mapping_definition_is_converted(self, registry):
        stored = registry.register("a", {"id": "a", "name": "A Module"})

        assert isinstance(stored, ModuleDefinition)
        assert registry.get("a") is stored

    def test_duplicate_registration_keeps_first(self, registry, recorder):
        first = _definition()
        second = _definition(services={"other": 1})

        registry.register("a", first)
        returned = registry.register("a", second)

        assert returned is first
        assert registry.get("a") is first
        duplicates = recorder.of_kind(TelemetryKind.MODULE_DUPLICATE)
        assert len(duplicates) == 1
        assert duplicates[0].module_name == "a"
        assert duplicates[0].error.kind == ErrorKind.DUPLICATE_MODULE

    def test_list_all_is_an_independent_snapshot(self, registry):
        registry.register("a", _definition())
        snapshot = registry.list_all()
        snapshot["b"] = _definition("b")
        del snapshot["a"]

        assert registry.names() == ["a"]
        assert registry.get("b") is None

    def test_iteration_follows_registration_order(self, registry):
        for name in ("c", "a", "b"):
            registry.register(name, _definition(name))

        assert list(registry) == ["c", "a", "b"]

    def test_default_telemetry_is_logging(self, caplog):
        registry = ModuleRegistry()
        registry.register("a", _definition())
        registry.register("a", _definition())

        assert any("module.duplicate" in r.getMessage() for r in caplog.records)

    def test_registered_event_emitted(self):
        recorder = TelemetryRecorder()
        ModuleRegistry(telemetry=recorder).register("a", _definition())

        assert recorder.modules(TelemetryKind.MODULE_REGISTERED) == ["a"]
