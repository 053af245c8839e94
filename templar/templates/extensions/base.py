"""
Extension contract.

An extension is an object with a class-level ``name`` and a callable
behavior. Registering it on an engine exposes ``functions()`` as template
functions; by default that is the extension itself under its name.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Dict, TYPE_CHECKING

if TYPE_CHECKING:
    from ..engine import TemplateEngine


class Extension(ABC):
    """
    Base class for template extensions.

    Example:
        class Greeting(Extension):
            name = "greet"

            def __call__(self, who: str) -> str:
                return f"Hello {who}!"

        engine.load_extension(Greeting())
        # {{ greet("World") }}
    """

    name: ClassVar[str]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        name = cls.__dict__.get("name")
        if name is not None and not isinstance(name, str):
            raise TypeError(f"{cls.__qualname__}.name must be a string, got {type(name).__name__}")

    @classmethod
    def get_name(cls) -> str:
        try:
            return cls.name
        except AttributeError:
            raise TypeError(f"{cls.__qualname__} does not define an extension name") from None

    @abstractmethod
    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        ...

    def functions(self) -> Dict[str, Callable[..., Any]]:
        """Template functions contributed by this extension."""
        return {self.get_name(): self}

    def register(self, engine: "TemplateEngine") -> None:
        for function_name, function in self.functions().items():
            engine.register_function(function_name, function)
