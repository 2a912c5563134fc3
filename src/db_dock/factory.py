"""Target discovery and client factory.

Locates the running MySQL container through the Docker Engine API and
wraps it in a ``Target`` handle.  Two lookup strategies, in order:

1. Swarm service label ``com.docker.swarm.service.name=<stack_ns>_<service_name>``
2. Published host port ``mysql_published_port`` (non-swarm / compose setups)

There is no cached adapter: every run locates its own target and passes
the resulting client explicitly to the orchestrators.
"""

import logging

import docker
from docker.errors import DockerException

from db_dock.adapters.docker_exec import DockerExecClient
from db_dock.config.models import DockSettings, Target
from db_dock.errors import DiscoveryError

logger = logging.getLogger(__name__)

SWARM_SERVICE_LABEL = "com.docker.swarm.service.name"


def _first_running(docker_client, filters: dict[str, str]) -> str | None:
    """Return the id of the first running container matching ``filters``."""
    containers = docker_client.containers.list(filters={**filters, "status": "running"})
    if not containers:
        return None
    return containers[0].id


def locate_container(settings: DockSettings, docker_client=None) -> str:
    """Find the running MySQL container and return its id.

    Args:
        settings: Discovery hints (stack namespace, service name, port).
        docker_client: Docker SDK client.  Defaults to ``docker.from_env()``.

    Returns:
        Container id.

    Raises:
        DiscoveryError: If the Docker daemon is unreachable or neither
            strategy finds a running container.
    """
    try:
        if docker_client is None:
            docker_client = docker.from_env()

        label = f"{SWARM_SERVICE_LABEL}={settings.swarm_service_label}"
        container_id = _first_running(docker_client, {"label": label})

        if container_id is None:
            logger.warning(
                "No container with service label %s, falling back to port %s",
                settings.swarm_service_label,
                settings.mysql_published_port,
            )
            container_id = _first_running(
                docker_client, {"publish": str(settings.mysql_published_port)}
            )
    except DockerException as e:
        raise DiscoveryError(f"Cannot query Docker: {e}") from e

    if container_id is None:
        raise DiscoveryError(
            f"Could not find any running MySQL container "
            f"(service {settings.swarm_service_label}, "
            f"port {settings.mysql_published_port})"
        )

    logger.debug("Using container: %s", container_id)
    return container_id


def locate_target(settings: DockSettings, docker_client=None) -> Target:
    """Locate the container and bundle it with the connection coordinates."""
    return Target(
        container_id=locate_container(settings, docker_client=docker_client),
        user=settings.mysql_user,
        password=settings.mysql_password,
        port=settings.mysql_internal_port,
    )


def get_client(settings: DockSettings, docker_client=None) -> DockerExecClient:
    """Return a ``DockerExecClient`` bound to a freshly located target.

    Example:
        >>> client = get_client(load_settings())
        >>> await client.list_databases()
        ['information_schema', 'shop', ...]
    """
    target = locate_target(settings, docker_client=docker_client)
    return DockerExecClient(target, docker_bin=settings.docker_bin)
