"""
Providers: the ways the container can build an object.

- ClassProvider: call a class, injecting annotated constructor arguments
- FactoryProvider: call a function, injecting annotated arguments
- ValueProvider: hand out a fixed object
- AliasProvider: forward to another token
"""

from typing import Any, Callable, Dict, NamedTuple, Optional, Type, Union
import inspect

from .core import ProviderMeta, ResolveCtx, SCOPES, token_to_key
from .errors import DIError


class Dependency(NamedTuple):
    token: Any
    optional: bool


def _check_scope(scope: str) -> str:
    if scope not in SCOPES:
        raise DIError(f"Unknown scope '{scope}'; expected one of {sorted(SCOPES)}")
    return scope


def _strip_none(annotation: Any) -> Any:
    """Optional[X] and X | None inject X."""
    args = getattr(annotation, "__args__", None)
    if args and type(None) in args:
        remaining = [arg for arg in args if arg is not type(None)]
        if len(remaining) == 1:
            return remaining[0]
    return annotation


def _read_dependencies(func: Callable, *, owner: Optional[str] = None) -> Dict[str, Dependency]:
    """
    Map parameter names to injectable dependencies.

    Parameters with a default are optional. Unannotated parameters are
    skipped, unless ``owner`` is given and the parameter is required.
    """
    try:
        signature = inspect.signature(func, eval_str=True)
    except NameError:
        signature = inspect.signature(func)

    dependencies = {}
    for param in signature.parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue

        optional = param.default is not param.empty
        if param.annotation is param.empty:
            if owner is not None and not optional:
                raise DIError(f"{owner}: parameter '{param.name}' has no type annotation")
            continue

        dependencies[param.name] = Dependency(_strip_none(param.annotation), optional)
    return dependencies


def _inject(dependencies: Dict[str, Dependency], ctx: ResolveCtx) -> Dict[str, Any]:
    kwargs = {}
    for name, dependency in dependencies.items():
        value = ctx.resolve(dependency.token, optional=dependency.optional)
        # Missing optional dependencies keep the callee's default
        if value is None and dependency.optional:
            continue
        kwargs[name] = value
    return kwargs


class ClassProvider:
    """
    Build a class, resolving its constructor arguments by annotation.

    Every required constructor argument must be annotated.
    """

    __slots__ = ("_meta", "_cls", "_dependencies")

    def __init__(
        self,
        cls: Type,
        scope: str = "app",
        tags: tuple[str, ...] = (),
        token: Optional[Union[Type, str]] = None,
    ):
        self._cls = cls
        if cls.__init__ is object.__init__:
            self._dependencies: Dict[str, Dependency] = {}
        else:
            # The class signature leaves out ``self``
            self._dependencies = _read_dependencies(cls, owner=f"{cls.__qualname__}.__init__")
        self._meta = ProviderMeta(
            name=cls.__name__,
            token=token_to_key(token if token is not None else cls),
            scope=_check_scope(scope),
            tags=tags,
        )

    @property
    def meta(self) -> ProviderMeta:
        return self._meta

    @property
    def cls(self) -> Type:
        return self._cls

    def instantiate(self, ctx: ResolveCtx) -> Any:
        return self._cls(**_inject(self._dependencies, ctx))


class FactoryProvider:
    """
    Call a factory, resolving its annotated parameters.

    The token defaults to ``name`` or to the factory's qualified name.
    """

    __slots__ = ("_meta", "_factory", "_dependencies")

    def __init__(
        self,
        factory: Callable,
        scope: str = "app",
        tags: tuple[str, ...] = (),
        name: Optional[str] = None,
        token: Optional[Union[Type, str]] = None,
    ):
        self._factory = factory
        self._dependencies = _read_dependencies(factory)

        if token is None:
            token = name or f"{factory.__module__}.{factory.__qualname__}"
        self._meta = ProviderMeta(
            name=name or factory.__name__,
            token=token_to_key(token),
            scope=_check_scope(scope),
            tags=tags,
        )

    @property
    def meta(self) -> ProviderMeta:
        return self._meta

    def instantiate(self, ctx: ResolveCtx) -> Any:
        return self._factory(**_inject(self._dependencies, ctx))


class ValueProvider:
    """Always hand out the same object."""

    __slots__ = ("_meta", "_value")

    def __init__(
        self,
        value: Any,
        token: Union[Type, str],
        name: Optional[str] = None,
        scope: str = "singleton",
        tags: tuple[str, ...] = (),
    ):
        self._value = value
        self._meta = ProviderMeta(
            name=name or f"{token_to_key(token)} value",
            token=token_to_key(token),
            scope=_check_scope(scope),
            tags=tags,
        )

    @property
    def meta(self) -> ProviderMeta:
        return self._meta

    def instantiate(self, ctx: ResolveCtx) -> Any:
        return self._value


class AliasProvider:
    """Resolve another token instead; that token's scope applies."""

    __slots__ = ("_meta", "_target", "_target_tag")

    def __init__(
        self,
        token: Union[Type, str],
        target: Union[Type, str],
        target_tag: Optional[str] = None,
        name: Optional[str] = None,
    ):
        self._target = target
        self._target_tag = target_tag
        self._meta = ProviderMeta(
            name=name or f"alias of {token_to_key(target)}",
            token=token_to_key(token),
            scope="transient",
        )

    @property
    def meta(self) -> ProviderMeta:
        return self._meta

    def instantiate(self, ctx: ResolveCtx) -> Any:
        return ctx.resolve(self._target, tag=self._target_tag)
