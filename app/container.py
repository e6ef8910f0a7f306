"""Process-wide registry resolving shared instances on first use."""

from __future__ import annotations

from typing import Any, Callable, Dict, Hashable, TypeVar

T = TypeVar("T")

Factory = Callable[[], Any]


class DependencyNotRegistered(LookupError):
    """Raised when a token is resolved before a factory was registered for it."""


def _token_name(token: Hashable) -> str:
    if isinstance(token, str):
        return token
    return getattr(token, "__name__", None) or repr(token)


class Container:
    """Singleton registry keyed by class (or any hashable token)."""

    def __init__(self) -> None:
        self._factories: Dict[Hashable, Factory] = {}
        self._instances: Dict[Hashable, Any] = {}

    def register(self, token: Hashable, factory: Factory) -> None:
        """Register ``factory`` for ``token``, dropping any instance built by a previous one."""

        self._factories[token] = factory
        self._instances.pop(token, None)

    def resolve(self, token: Callable[..., T]) -> T:
        if token in self._instances:
            return self._instances[token]

        factory = self._factories.get(token)
        if factory is None:
            raise DependencyNotRegistered(
                f"No registration found for token: {_token_name(token)}. "
                "Register a factory with container.register()."
            )

        instance = factory()
        self._instances[token] = instance
        return instance

    def is_registered(self, token: Hashable) -> bool:
        return token in self._factories

    def clear(self) -> None:
        self._instances.clear()
        self._factories.clear()


container = Container()


__all__ = ["Container", "DependencyNotRegistered", "container"]
