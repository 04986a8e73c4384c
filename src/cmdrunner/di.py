"""IoC container for dependency injection in cmdrunner."""

import inspect
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Type, TypeVar

T = TypeVar("T")


@dataclass
class ServiceRegistration:
    """Registration info for a service."""

    factory: Callable[..., Any]
    singleton: bool = True
    instance: Optional[Any] = None
    fixed: bool = False


class DependencyContainer:
    """
    IoC container for dependency injection.

    Usage:
        container = DependencyContainer()
        container.register(RunnerSettings, factory=load_settings)
        container.register(ProcessExecutor, SubprocessExecutor)

        executor = container.resolve(ProcessExecutor)
    """

    def __init__(self):
        self._registrations: Dict[Type, ServiceRegistration] = {}
        self._lock = threading.RLock()

    def register(
        self,
        interface: Type[T],
        implementation: Type[T] = None,
        factory: Callable[..., T] = None,
        singleton: bool = True,
        instance: T = None,
    ) -> "DependencyContainer":
        """
        Register a service.

        Args:
            interface: The interface/base class
            implementation: Concrete implementation class
            factory: Factory function to create instance
            singleton: If True, reuse same instance
            instance: Pre-created instance to use
        """
        if instance is not None:
            registration = ServiceRegistration(
                factory=lambda: instance, instance=instance, fixed=True
            )
        elif factory is not None:
            registration = ServiceRegistration(factory=factory, singleton=singleton)
        elif implementation is not None:
            registration = ServiceRegistration(factory=implementation, singleton=singleton)
        else:
            raise ValueError("Must provide implementation, factory, or instance")

        with self._lock:
            self._registrations[interface] = registration
        return self

    def resolve(self, interface: Type[T]) -> T:
        """Resolve a service instance."""
        with self._lock:
            if interface not in self._registrations:
                raise KeyError(f"No registration for {interface}")

            reg = self._registrations[interface]
            if reg.singleton and reg.instance is not None:
                return reg.instance

            instance = self._create_instance(reg.factory)
            if reg.singleton:
                reg.instance = instance
            return instance

    def _create_instance(self, factory: Callable) -> Any:
        """Create instance, resolving registered constructor dependencies."""
        try:
            sig = inspect.signature(factory)
        except ValueError:
            return factory()

        kwargs = {}
        for name, param in sig.parameters.items():
            if param.annotation is inspect.Parameter.empty:
                continue
            if self.has(param.annotation):
                kwargs[name] = self.resolve(param.annotation)
            elif param.default is inspect.Parameter.empty:
                raise KeyError(f"Cannot resolve parameter '{name}' of {factory}")

        return factory(**kwargs)

    def has(self, interface: Type) -> bool:
        """Check if service is registered."""
        return interface in self._registrations

    def reset(self) -> None:
        """Reset all singleton instances, keeping pre-created ones."""
        with self._lock:
            for reg in self._registrations.values():
                if not reg.fixed:
                    reg.instance = None


# Global container instance
_container: Optional[DependencyContainer] = None


def get_container() -> DependencyContainer:
    """Get the global container instance."""
    global _container
    if _container is None:
        _container = create_default_container()
    return _container


def set_container(container: Optional[DependencyContainer]) -> None:
    """Set the global container (useful for testing)."""
    global _container
    _container = container


def create_default_container() -> DependencyContainer:
    """Create container with default registrations."""
    from .backends.subprocess_executor import SubprocessExecutor
    from .interfaces.process import ProcessExecutor
    from .models import RunnerSettings, load_settings

    container = DependencyContainer()

    container.register(RunnerSettings, factory=load_settings)
    container.register(ProcessExecutor, SubprocessExecutor)

    return container
