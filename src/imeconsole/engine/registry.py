"""Engine registry for ime-console.

Engines are ``EngineClient`` subclasses registered under a short name.
Built-in engines register with the decorator at import time; third-party
packages declare entry-points in their own ``pyproject.toml`` under the
"imeconsole.engines" group.

Example
-------
Register an engine with the decorator::

    from imeconsole.engine.base import EngineClient
    from imeconsole.engine.registry import engine_registry

    @engine_registry.register("my-engine")
    class MyEngine(EngineClient):
        ...

Declare it from another distribution::

    [project.entry-points."imeconsole.engines"]
    my-engine = "my_package.engine:MyEngine"

Create an instance by name::

    engine_registry.load_entrypoints()
    engine = engine_registry.create("my-engine", schemas_file="schemas.yaml")
"""
from __future__ import annotations

import importlib.metadata
import logging
from collections.abc import Callable
from typing import Any

from imeconsole.engine.base import EngineClient

logger = logging.getLogger(__name__)

ENTRYPOINT_GROUP = "imeconsole.engines"


class EngineNotFoundError(KeyError):
    """Raised when a requested engine name is not in the registry."""

    def __init__(self, name: str, registry_name: str) -> None:
        self.engine_name = name
        self.registry_name = registry_name
        super().__init__(
            f"Engine {name!r} is not registered in the {registry_name!r} registry. "
            "Check that the package providing it is installed and its "
            "entry-points are declared."
        )


class EngineAlreadyRegisteredError(ValueError):
    """Raised when attempting to register a name that already exists."""

    def __init__(self, name: str, registry_name: str) -> None:
        self.engine_name = name
        self.registry_name = registry_name
        super().__init__(
            f"Engine {name!r} is already registered in the {registry_name!r} registry. "
            "Use a unique name or explicitly deregister the existing entry first."
        )


class EngineRegistry:
    """Registry mapping engine names to ``EngineClient`` subclasses.

    Parameters
    ----------
    name:
        A human-readable name for this registry (used in error messages).
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._engines: dict[str, type[EngineClient]] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, name: str) -> Callable[[type[EngineClient]], type[EngineClient]]:
        """Return a class decorator that registers the decorated engine.

        Raises
        ------
        EngineAlreadyRegisteredError
            If ``name`` is already in use in this registry.
        TypeError
            If the decorated class does not subclass ``EngineClient``.
        """

        def decorator(cls: type[EngineClient]) -> type[EngineClient]:
            self.register_class(name, cls)
            return cls

        return decorator

    def register_class(self, name: str, cls: type[EngineClient]) -> None:
        """Register an engine class directly, without the decorator."""
        if name in self._engines:
            raise EngineAlreadyRegisteredError(name, self._name)
        if not (isinstance(cls, type) and issubclass(cls, EngineClient)):
            raise TypeError(
                f"Cannot register {cls!r} under {name!r}: "
                "it must be a subclass of EngineClient."
            )
        self._engines[name] = cls
        logger.debug(
            "Registered engine %r -> %s in registry %r",
            name,
            cls.__qualname__,
            self._name,
        )

    def deregister(self, name: str) -> None:
        """Remove an engine from the registry.

        Raises
        ------
        EngineNotFoundError
            If ``name`` is not currently registered.
        """
        if name not in self._engines:
            raise EngineNotFoundError(name, self._name)
        del self._engines[name]
        logger.debug("Deregistered engine %r from registry %r", name, self._name)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str) -> type[EngineClient]:
        """Return the class registered under ``name``."""
        try:
            return self._engines[name]
        except KeyError:
            raise EngineNotFoundError(name, self._name) from None

    def create(self, name: str, **options: Any) -> EngineClient:
        """Instantiate the engine registered under ``name``.

        Parameters
        ----------
        name:
            Registered engine name.
        **options:
            Keyword arguments forwarded to the engine constructor.
        """
        engine = self.get(name)(**options)
        engine.engine_name = name
        return engine

    def list_engines(self) -> list[str]:
        """Return the registered engine names in alphabetical order."""
        return sorted(self._engines)

    def __contains__(self, name: object) -> bool:
        return name in self._engines

    def __len__(self) -> int:
        return len(self._engines)

    def __repr__(self) -> str:
        return f"EngineRegistry(name={self._name!r}, engines={self.list_engines()})"

    # ------------------------------------------------------------------
    # Entry-point loading
    # ------------------------------------------------------------------

    def load_entrypoints(self, group: str = ENTRYPOINT_GROUP) -> None:
        """Discover and register engines declared as package entry-points.

        Engines that are already registered are skipped, so repeated calls
        are idempotent.  Entry-points that fail to import or do not name an
        ``EngineClient`` subclass are logged and skipped.
        """
        for ep in importlib.metadata.entry_points(group=group):
            if ep.name in self._engines:
                logger.debug(
                    "Entry-point %r already registered in %r; skipping.",
                    ep.name,
                    self._name,
                )
                continue
            try:
                cls = ep.load()
            except Exception:
                logger.exception(
                    "Failed to load entry-point %r from group %r; skipping.",
                    ep.name,
                    group,
                )
                continue
            try:
                self.register_class(ep.name, cls)
            except (EngineAlreadyRegisteredError, TypeError):
                logger.warning(
                    "Entry-point %r loaded but could not be registered "
                    "in registry %r; skipping.",
                    ep.name,
                    self._name,
                )


engine_registry = EngineRegistry("engines")
