"""
Base connection factory interface.

Defines the contract every connection factory implements, and the registry
factories are selected from by name.

Example:
    ```python
    class VendorConnectionFactory(ConnectionFactory, factory_name="vendor"):
        def create_session(self, config: PolicyConfig) -> ClusterSession:
            # vendor-specific cluster setup
            ...
    ```
"""
from abc import ABC, abstractmethod
from typing import Callable, Dict, FrozenSet, Optional, Sequence

from hearth.configs.policy_config import PolicyConfig
from hearth.configs.read_config import ReadConf
from hearth.scanner import DefaultScanner, Scanner

from .session import ClusterSession

FactoryConstructor = Callable[[], "ConnectionFactory"]


class ConnectionFactory(ABC):
    """
    Abstract base class for connection factories.

    A connection factory turns a validated PolicyConfig into a live
    ClusterSession. Alternate strategies (a vendor variant, a locked-down
    variant) subclass it and register under their own name; callers pick one
    by name through ``resolve_factory`` and never construct them directly.

    Factories hold no per-session state, so one instance may create sessions
    from many threads at once.
    """

    _registry: Dict[str, FactoryConstructor] = {}

    def __init_subclass__(cls, factory_name: str = None, **kwargs):
        super().__init_subclass__(**kwargs)
        if factory_name:
            cls._registry[factory_name] = cls
            cls.factory_name = factory_name

    factory_name: Optional[str] = None

    @abstractmethod
    def create_session(self, config: PolicyConfig) -> ClusterSession:
        """
        Create a live session for ``config``.

        Args:
            config: Validated connection settings

        Returns:
            ClusterSession owned by the caller

        Raises:
            CredentialLoadError: If TLS material cannot be loaded
            AuthenticationError: If the cluster rejects the credentials
            ClusterConnectionError: If no node can be reached
        """

    @property
    def properties(self) -> FrozenSet[str]:
        """Custom property names this factory accepts from the property bag."""
        return frozenset()

    def get_scanner(
        self,
        session: ClusterSession,
        column_names: Sequence[str],
        read_conf: Optional[ReadConf] = None,
    ) -> Scanner:
        """Scanner bound to ``session`` projecting rows onto ``column_names``."""
        return DefaultScanner(session, column_names, read_conf or ReadConf())


def register_factory(name: str, constructor: FactoryConstructor) -> None:
    """
    Register a factory constructor under ``name``.

    Used for factories that are not ConnectionFactory subclasses declared
    with ``factory_name``, such as ones contributed through entry points.
    A later registration under the same name replaces the earlier one.

    Args:
        name: Name callers select the factory by
        constructor: Zero-argument callable returning a ConnectionFactory
    """
    if not name:
        raise ValueError("Factory name must not be empty")
    ConnectionFactory._registry[name] = constructor


def registered_factories() -> Dict[str, FactoryConstructor]:
    """Copy of the registry, name -> constructor."""
    return dict(ConnectionFactory._registry)
