"""
Selecting a connection factory by name.

Factories come from two places: ConnectionFactory subclasses declared with
``factory_name`` (the built-in ones are imported here), and the
``hearth.connection_factories`` entry point group, which lets other
distributions contribute factories without touching hearth:

    [project.entry-points."hearth.connection_factories"]
    vendor = "hearth_vendor:VendorConnectionFactory"

Entry points are loaded once per process, on first resolution.
"""
import importlib.metadata as metadata
import threading
from typing import Any, Callable, List, Mapping, Optional

from hearth.configs.properties import FACTORY, policy_config_from_properties
from hearth.messages import get_logger
from hearth.utility.exceptions import ResolutionError
from hearth.utility.settings import settings

from .base import ConnectionFactory, register_factory, registered_factories
from .default import DefaultConnectionFactory  # noqa: F401  registers "default"
from .secure import SecureConnectionFactory  # noqa: F401  registers "secure"
from .session import ClusterSession

logger = get_logger("hearth.connections.resolver")

_entry_points_lock = threading.Lock()
_entry_points_loaded = False


def load_entry_point_factories(group: Optional[str] = None) -> List[str]:
    """
    Register the factories advertised in an entry point group.

    Entry points that fail to load are reported and skipped.

    Returns:
        Names registered from the group
    """
    group = group or settings.entry_point_group
    if not group:
        return []

    registered = []
    for entry_point in sorted(metadata.entry_points(group=group), key=lambda ep: ep.name):
        try:
            constructor = entry_point.load()
        except Exception as e:
            logger.warning(
                f"Skipping connection factory '{entry_point.name}' "
                f"({entry_point.value}): {e}"
            )
            continue
        if not callable(constructor):
            logger.warning(
                f"Skipping connection factory '{entry_point.name}': "
                f"{entry_point.value} is not callable"
            )
            continue
        register_factory(entry_point.name, constructor)
        registered.append(entry_point.name)
        logger.debug(f"Registered connection factory '{entry_point.name}'")
    return registered


def _ensure_entry_points() -> None:
    global _entry_points_loaded
    if _entry_points_loaded:
        return
    with _entry_points_lock:
        if not _entry_points_loaded:
            load_entry_point_factories()
            _entry_points_loaded = True


def factory_names() -> List[str]:
    """Names of every registered factory."""
    _ensure_entry_points()
    return sorted(registered_factories())


def resolve_factory(name: Optional[str] = None) -> ConnectionFactory:
    """
    Instantiate the connection factory registered under ``name``.

    Args:
        name: Registered factory name; None or empty selects the default

    Returns:
        A new ConnectionFactory

    Raises:
        ResolutionError: If no factory is registered under ``name``
    """
    name = name.strip() if name else ""
    name = name or settings.default_factory
    _ensure_entry_points()

    factories = registered_factories()
    constructor = factories.get(name)
    if constructor is None:
        raise ResolutionError(
            f"Unknown connection factory '{name}'. "
            f"Known factories: {', '.join(sorted(factories))}"
        )

    try:
        factory = constructor()
    except Exception as e:
        raise ResolutionError(
            f"Connection factory '{name}' could not be created: {e}"
        ) from e
    if not isinstance(factory, ConnectionFactory):
        raise ResolutionError(
            f"Connection factory '{name}' produced {type(factory).__name__}, "
            "not a ConnectionFactory"
        )
    return factory


def factory_from_properties(properties: Mapping[str, Any]) -> ConnectionFactory:
    """Resolve the factory named by ``hearth.connection.factory``."""
    return resolve_factory(properties.get(FACTORY))


def session_from_properties(
    properties: Mapping[str, Any],
    *,
    auth_provider: Any = None,
    resolve_host: Optional[Callable[[str], str]] = None,
) -> ClusterSession:
    """
    Property bag in, live session out.

    Raises:
        ResolutionError: If the named factory is not registered
        ConfigValidationError: If the property bag is invalid
        SessionError: If the session cannot be created
    """
    factory = factory_from_properties(properties)
    kwargs = {"resolve_host": resolve_host} if resolve_host else {}
    config = policy_config_from_properties(
        properties,
        factory_properties=factory.properties,
        auth_provider=auth_provider,
        **kwargs,
    )
    return factory.create_session(config)

