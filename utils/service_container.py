"""Service container for dependency injection.

The bot owns one container. It holds the shared session factory, the
repositories built on it and the command router, and cogs look their
collaborators up here instead of reaching for module globals.
"""

from collections.abc import Callable
from typing import Any, TypeVar, cast

T = TypeVar("T")


class ServiceContainer:
    """A container for managing service dependencies.

    Services can be registered as instances or as factories; a factory
    registered with ``singleton=True`` is called once and its result reused.
    """

    def __init__(self) -> None:
        """Initialize an empty service container."""
        self._services: dict[str, Any] = {}
        self._factories: dict[str, Callable[[], Any]] = {}
        self._singletons: dict[str, bool] = {}
        self._singleton_instances: dict[str, Any] = {}

    def register(self, service_id: str, service: Any) -> None:
        """Register a service instance.

        Args:
            service_id: The identifier for the service.
            service: The service instance.
        """
        self._services[service_id] = service

    def register_factory(
        self, service_id: str, factory: Callable[[], Any], singleton: bool = False
    ) -> None:
        """Register a service factory.

        Args:
            service_id: The identifier for the service.
            factory: A callable that creates the service.
            singleton: Whether the service should be a singleton.
        """
        self._factories[service_id] = factory
        self._singletons[service_id] = singleton
        self._singleton_instances.pop(service_id, None)

    def get(self, service_id: str) -> Any:
        """Get a service by its identifier.

        Raises:
            KeyError: If the service is not registered.
        """
        if service_id in self._services:
            return self._services[service_id]

        if service_id in self._factories:
            if service_id in self._singleton_instances:
                return self._singleton_instances[service_id]

            instance = self._factories[service_id]()
            if self._singletons.get(service_id, False):
                self._singleton_instances[service_id] = instance
            return instance

        raise KeyError(f"Service '{service_id}' not found in container")

    def get_typed(self, service_id: str, expected_type: type[T]) -> T:
        """Get a service by its identifier and check its type.

        Raises:
            KeyError: If the service is not registered.
            TypeError: If the service is not of the expected type.
        """
        service = self.get(service_id)
        if not isinstance(service, expected_type):
            raise TypeError(
                f"Service '{service_id}' is not of type {expected_type.__name__}"
            )
        return cast(expected_type, service)

    def has(self, service_id: str) -> bool:
        """Check if a service is registered."""
        return service_id in self._services or service_id in self._factories
