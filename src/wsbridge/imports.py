from __future__ import annotations

import importlib
from collections.abc import Iterable
from typing import Any


__all__ = ["lazy_import"]


def lazy_import(namespace: dict[str, Any], aliases: dict[str, str]) -> None:
    """
    Provide lazy, module-level imports.

    Typical use::

        lazy_import(
            globals(),
            aliases={
                "<name>": "<source module>",
                ...
            },
        )

    This function defines ``__getattr__`` and ``__dir__`` per :pep:`562`.

    Importing the package doesn't import source modules until one of their
    names is accessed. For example, the transport driver isn't imported until
    :func:`~wsbridge.asyncio.client.connect` is used.

    """
    assert not set(namespace) & set(aliases), "namespace conflict"

    package = namespace["__name__"]

    def __getattr__(name: str) -> Any:
        try:
            source = aliases[name]
        except KeyError:
            raise AttributeError(
                f"module {package!r} has no attribute {name!r}"
            ) from None
        module = importlib.import_module(source, package)
        return getattr(module, name)

    def __dir__() -> Iterable[str]:
        return sorted(set(namespace) | set(aliases))

    namespace["__getattr__"] = __getattr__
    namespace["__dir__"] = __dir__
