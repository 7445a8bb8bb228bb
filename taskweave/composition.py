"""Reusable units of work and parameterized factories for building task compositions."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any, Generic, TypeVar

C = TypeVar("C")


class CloneableWork:
    """A shareable piece of work that can be executed any number of times."""

    __slots__ = ("_work",)

    def __init__(self, work: Callable[[], Any]) -> None:
        if not callable(work):
            raise TypeError("work must be callable")
        self._work = work

    def execute(self) -> None:
        """Run the wrapped work."""
        self._work()

    def __call__(self) -> None:
        self.execute()


class _Kind(Enum):
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BOOL = "bool"


class CompositionParams:
    """Typed key/value parameters for a parameterized composition.

    Each key holds one value of one kind; a getter returns None when the key is
    missing or holds a value of a different kind. Setters return the instance
    so calls can be chained.
    """

    def __init__(self) -> None:
        self._params: dict[str, tuple[_Kind, Any]] = {}

    def set_int(self, key: str, value: int) -> CompositionParams:
        """Store an integer parameter."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"integer expected for {key!r}, got {type(value).__name__}")
        self._params[key] = (_Kind.INT, value)
        return self

    def set_string(self, key: str, value: str) -> CompositionParams:
        """Store a string parameter."""
        if not isinstance(value, str):
            raise TypeError(f"string expected for {key!r}, got {type(value).__name__}")
        self._params[key] = (_Kind.STRING, value)
        return self

    def set_float(self, key: str, value: float) -> CompositionParams:
        """Store a float parameter; integers are widened to float."""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"float expected for {key!r}, got {type(value).__name__}")
        self._params[key] = (_Kind.FLOAT, float(value))
        return self

    def set_bool(self, key: str, value: bool) -> CompositionParams:
        """Store a boolean parameter."""
        if not isinstance(value, bool):
            raise TypeError(f"bool expected for {key!r}, got {type(value).__name__}")
        self._params[key] = (_Kind.BOOL, value)
        return self

    def _get(self, key: str, kind: _Kind) -> Any:
        stored = self._params.get(key)
        if stored is None or stored[0] is not kind:
            return None
        return stored[1]

    def get_int(self, key: str) -> int | None:
        """Return the integer stored under ``key``, or None."""
        return self._get(key, _Kind.INT)

    def get_string(self, key: str) -> str | None:
        """Return the string stored under ``key``, or None."""
        return self._get(key, _Kind.STRING)

    def get_float(self, key: str) -> float | None:
        """Return the float stored under ``key``, or None."""
        return self._get(key, _Kind.FLOAT)

    def get_bool(self, key: str) -> bool | None:
        """Return the boolean stored under ``key``, or None."""
        return self._get(key, _Kind.BOOL)

    def __contains__(self, key: object) -> bool:
        return key in self._params

    def __len__(self) -> int:
        return len(self._params)

    def __repr__(self) -> str:
        items = ", ".join(f"{key}={value!r}" for key, (_, value) in self._params.items())
        return f"CompositionParams({items})"


class ParameterizedComposition(Generic[C]):
    """Builds compositions from a factory that takes CompositionParams."""

    def __init__(self, factory: Callable[[CompositionParams], C]) -> None:
        if not callable(factory):
            raise TypeError("factory must be callable")
        self._factory = factory
        self._default_params = CompositionParams()

    def with_defaults(self, params: CompositionParams) -> ParameterizedComposition[C]:
        """Set the parameters used by :meth:`instantiate_default` and return self."""
        self._default_params = params
        return self

    def instantiate(self, params: CompositionParams) -> C:
        """Build a composition with the given parameters."""
        return self._factory(params)

    def instantiate_default(self) -> C:
        """Build a composition with the default parameters."""
        return self._factory(self._default_params)