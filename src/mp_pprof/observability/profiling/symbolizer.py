"""Observability – address symbolization for live Python callables.

CPython addresses are object identities: ``id(func)`` of a function,
method, builtin or code object.  :class:`PythonSymbolizer` indexes every
such object reachable from the garbage collector and the loaded modules
at construction time.
"""
from __future__ import annotations

import gc
import sys
import types
from typing import Any, Protocol, runtime_checkable

__all__ = ["PythonSymbolizer", "Symbolizer"]

_CALLABLE_TYPES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.CodeType,
)


@runtime_checkable
class Symbolizer(Protocol):
    """Port: resolve a raw address to a readable name."""

    def resolve(self, address: int) -> str | None: ...


def _qualified_name(obj: Any) -> str | None:
    if isinstance(obj, types.CodeType):
        return f"{obj.co_filename}:{obj.co_firstlineno}:{obj.co_qualname}"
    if isinstance(obj, types.MethodType):
        obj = obj.__func__
    qualname = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None)
    if not qualname:
        return None
    module = getattr(obj, "__module__", None)
    return f"{module}.{qualname}" if module else qualname


class PythonSymbolizer:
    """Index of ``id(obj) -> qualified name`` for live callables."""

    def __init__(self) -> None:
        self._names: dict[int, str] = {}
        self._index(gc.get_objects())
        for module in list(sys.modules.values()):
            self._index(list(getattr(module, "__dict__", {}).values()))

    def __len__(self) -> int:
        return len(self._names)

    def _index(self, objects: Any) -> None:
        for obj in objects:
            if not isinstance(obj, _CALLABLE_TYPES):
                continue
            address = id(obj)
            if address in self._names:
                continue
            name = _qualified_name(obj)
            if name is not None:
                self._names[address] = name
            code = getattr(obj, "__code__", None)
            if isinstance(code, types.CodeType) and id(code) not in self._names:
                self._names[id(code)] = _qualified_name(code) or name or ""

    def resolve(self, address: int) -> str | None:
        return self._names.get(address)
