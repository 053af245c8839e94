"""
Test extension resolution: instances, service names and class names.
"""

import pytest

from templar.di import Container, FactoryProvider, ServiceLookup
from templar.faults import InvalidExtensionError
from templar.templates import Extension, TemplateEngine
from templar.templates.extensions import (
    ClassNameSpec,
    ExtensionResolver,
    InstanceSpec,
    ServiceNameSpec,
    default_registry,
)


class Greeting(Extension):
    name = "greet"

    def __init__(self, greeting: str = "Hello"):
        self.greeting = greeting

    def __call__(self, who):
        return f"{self.greeting} {who}!"


class Nameless(Extension):
    def __call__(self):
        return "anonymous"


class NotAnExtension:
    def __call__(self):
        return "nope"


class DictLookup:
    """Minimal service lookup that records every get()."""

    def __init__(self, services=None):
        self.services = dict(services or {})
        self.gets = []

    def has(self, token):
        return token in self.services

    def get(self, token):
        self.gets.append(token)
        value = self.services[token]
        return value() if callable(value) and not isinstance(value, Extension) else value


@pytest.fixture
def lookup():
    return DictLookup()


@pytest.fixture
def resolver(lookup, registry):
    return ExtensionResolver(lookup, registry)


def test_dict_lookup_is_a_service_lookup(lookup):
    assert isinstance(lookup, ServiceLookup)


def test_default_registry_used_without_argument(lookup):
    assert ExtensionResolver(lookup).registry is default_registry


# ============================================================================
# Classification
# ============================================================================

class TestClassify:

    def test_instance(self, resolver):
        extension = Greeting()
        assert resolver.classify(extension) == InstanceSpec(extension)

    def test_service_name(self, resolver, lookup):
        lookup.services["app.greeting"] = Greeting
        assert resolver.classify("app.greeting") == ServiceNameSpec("app.greeting")

    def test_class_name(self, resolver, registry):
        registry.register(Greeting)
        assert resolver.classify("Greeting") == ClassNameSpec("Greeting")

    def test_service_wins_over_class(self, resolver, lookup, registry):
        lookup.services["Greeting"] = lambda: Greeting("Service")
        registry.register(Greeting)

        assert resolver.classify("Greeting") == ServiceNameSpec("Greeting")
        assert resolver.resolve("Greeting")("Bob") == "Service Bob!"

    @pytest.mark.parametrize("value,type_name", [
        (42, "int"),
        (None, "NoneType"),
        (["Greeting"], "list"),
        (Greeting, "ABCMeta"),
    ])
    def test_invalid_type(self, resolver, value, type_name):
        with pytest.raises(InvalidExtensionError) as exc_info:
            resolver.classify(value)

        error = exc_info.value
        assert error.reason == "type"
        assert error.message.endswith(f"received {type_name}")
        assert "ExtensionResolver expects extension instances" in error.message

    def test_instance_without_name(self, resolver):
        with pytest.raises(InvalidExtensionError) as exc_info:
            resolver.classify(Nameless())

        error = exc_info.value
        assert error.reason == "type"
        assert "Nameless does not" in error.message

    def test_unresolved_name(self, resolver):
        with pytest.raises(InvalidExtensionError) as exc_info:
            resolver.classify("MissingExtension")

        error = exc_info.value
        assert error.reason == "unresolved"
        assert error.spec == "MissingExtension"
        assert '"MissingExtension" does not resolve to either' in error.message


# ============================================================================
# Materialization
# ============================================================================

class TestMaterialize:

    def test_instance_identity(self, resolver):
        extension = Greeting()
        assert resolver.resolve(extension) is extension

    def test_service_fetched_on_every_resolution(self, resolver, lookup):
        lookup.services["app.greeting"] = Greeting

        first = resolver.resolve("app.greeting")
        second = resolver.resolve("app.greeting")

        assert lookup.gets == ["app.greeting", "app.greeting"]
        assert first is not second

    def test_service_type_may_change_between_calls(self, resolver, lookup):
        class Farewell(Extension):
            name = "bye"

            def __call__(self, who):
                return f"Bye {who}"

        produced = iter([Greeting(), Farewell()])
        lookup.services["app.dynamic"] = lambda: next(produced)

        assert isinstance(resolver.resolve("app.dynamic"), Greeting)
        assert isinstance(resolver.resolve("app.dynamic"), Farewell)

    def test_class_constructed_with_no_arguments(self, resolver, registry):
        registry.register(Greeting)

        extension = resolver.resolve("Greeting")

        assert isinstance(extension, Greeting)
        assert extension.greeting == "Hello"
        assert resolver.resolve("Greeting") is not extension

    def test_qualified_class_name(self, resolver, registry):
        registry.register(Greeting)
        assert isinstance(resolver.resolve(f"{__name__}.Greeting"), Greeting)

    def test_service_contract_violation(self, resolver, lookup):
        lookup.services["app.broken"] = NotAnExtension

        with pytest.raises(InvalidExtensionError) as exc_info:
            resolver.resolve("app.broken")

        error = exc_info.value
        assert error.reason == "contract"
        assert error.message == (
            "ExtensionResolver expects extension services to implement "
            "templar.templates.extensions.base.Extension; received NotAnExtension"
        )

    def test_class_without_name(self, resolver, registry):
        registry.register(Nameless)

        with pytest.raises(InvalidExtensionError) as exc_info:
            resolver.resolve("Nameless")

        error = exc_info.value
        assert error.reason == "contract"
        assert error.spec == "Nameless"
        assert "class-level name" in error.message

    def test_service_without_name(self, resolver, lookup):
        lookup.services["app.nameless"] = Nameless()

        with pytest.raises(InvalidExtensionError) as exc_info:
            resolver.resolve("app.nameless")
        assert exc_info.value.reason == "contract"

    def test_class_contract_violation(self, resolver, registry):
        registry.register(NotAnExtension)

        with pytest.raises(InvalidExtensionError) as exc_info:
            resolver.resolve("NotAnExtension")
        assert exc_info.value.reason == "contract"


# ============================================================================
# Loading
# ============================================================================

def test_load_registers_functions(resolver, registry):
    registry.register(Greeting)
    engine = TemplateEngine()

    extension = resolver.load(engine, "Greeting")

    assert engine.get_function("greet") is extension


def test_resolver_with_container(registry):
    container = Container()
    container.register(FactoryProvider(lambda: Greeting("Hi"), name="app.greeting", scope="transient"))
    resolver = ExtensionResolver(container, registry)

    assert resolver.resolve("app.greeting")("Ann") == "Hi Ann!"
    assert resolver.resolve("app.greeting") is not resolver.resolve("app.greeting")
