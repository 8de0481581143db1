"""
Tests for the application context.
"""
from modkernel.kernel.context import ApplicationContext


class TestServiceLookup:

    def test_unknown_module_returns_none(self):
        assert ApplicationContext().get_service("ghost") is None
        assert ApplicationContext().get_service("ghost", "anything") is None

    def test_module_services_returned_whole(self):
        services = {"ping": lambda: "pong"}
        context = ApplicationContext(services={"net": services})

        assert context.get_service("net") is services

    def test_named_service(self):
        context = ApplicationContext(services={"net": {"ping": lambda: "pong"}})

        assert context.get_service("net", "ping")() == "pong"
        assert context.get_service("net", "missing") is None

    def test_empty_service_mapping_is_not_none(self):
        context = ApplicationContext(services={"empty": {}})

        assert context.get_service("empty") == {}

    def test_non_mapping_services_do_not_raise(self):
        context = ApplicationContext(services={"odd": 42})

        assert context.get_service("odd", "x") is None


class TestState:

    def test_set_then_get(self):
        context = ApplicationContext()
        context.set_state("user", "john")

        assert context.get_state("user") == "john"

    def test_last_write_wins(self):
        context = ApplicationContext()
        context.set_state("k", 1)
        context.set_state("k", 2)

        assert context.get_state("k") == 2

    def test_missing_key_uses_default(self):
        assert ApplicationContext().get_state("nope") is None
        assert ApplicationContext().get_state("nope", "fallback") == "fallback"

    def test_stored_none_is_kept(self):
        context = ApplicationContext()
        context.set_state("k", None)

        assert context.get_state("k", "fallback") is None


class TestForModule:

    def test_copy_shares_mutable_state(self):
        context = ApplicationContext(config={"a": 1})
        scoped = context.for_module("users")
        scoped.set_state("seen", True)
        scoped.services["users"] = {}

        assert scoped.module_name == "users"
        assert context.module_name is None
        assert context.get_state("seen") is True
        assert "users" in context.services
        assert scoped.config is context.config
