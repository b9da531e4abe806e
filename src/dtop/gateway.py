"""Docker Engine access for dtop."""

import logging
import os
import time
from collections.abc import Callable
from dataclasses import dataclass

import docker
import requests
from docker.tls import TLSConfig

from dtop.config import Endpoint
from dtop.models import Action

logger = logging.getLogger(__name__)

# pid, elapsed time, %cpu, %mem, command: the fixed order ProcessRow relies on
PS_ARGS = "xo pid,etime,%cpu,%mem,cmd"

ProcessRow = tuple[str, str, str, str, str]


class GatewayError(Exception):
    """A runtime query or command failed."""


class ConnectionFailed(GatewayError):
    """The runtime could not be reached at startup."""


@dataclass(slots=True, frozen=True)
class ContainerInfo:
    """A container as listed by the runtime."""

    id: str
    name: str
    image: str
    command: str
    created: float
    status: str


def human_duration(seconds: float) -> str:
    """Format an elapsed time the way ``docker ps`` does."""
    if seconds < 1:
        return "Less than a second"
    if int(seconds) == 1:
        return "1 second"
    if seconds < 60:
        return f"{int(seconds)} seconds"
    minutes = int(seconds / 60)
    if minutes == 1:
        return "About a minute"
    if minutes < 60:
        return f"{minutes} minutes"
    hours = int(seconds / 3600 + 0.5)
    if hours == 1:
        return "About an hour"
    if hours < 48:
        return f"{hours} hours"
    if hours < 24 * 7 * 2:
        return f"{hours // 24} days"
    if hours < 24 * 30 * 2:
        return f"{hours // 24 // 7} weeks"
    if hours < 24 * 365 * 2:
        return f"{hours // 24 // 30} months"
    return f"{int(seconds / 3600 / 24 / 365)} years"


def _tls_config(cert_path: str) -> TLSConfig:
    ca_cert = os.path.join(cert_path, "ca.pem")
    return TLSConfig(
        client_cert=(
            os.path.join(cert_path, "cert.pem"),
            os.path.join(cert_path, "key.pem"),
        ),
        ca_cert=ca_cert if os.path.exists(ca_cert) else None,
        verify=ca_cert if os.path.exists(ca_cert) else False,
    )


def connect(endpoint: Endpoint) -> "DockerGateway":
    """
    Open a client for the given endpoint and make sure the daemon answers.

    Raises:
        ConnectionFailed: If the client cannot be built or the ping fails.
    """
    try:
        tls = _tls_config(endpoint.cert_path) if endpoint.uses_tls else False
        client = docker.APIClient(base_url=endpoint.url, tls=tls, version="auto")
        client.ping()
    except (docker.errors.DockerException, requests.RequestException, OSError) as e:
        raise ConnectionFailed(str(e)) from e
    logger.info("Connected to %s", endpoint.url)
    return DockerGateway(client)


class DockerGateway:
    """
    Query and command surface over a low-level Docker ``APIClient``.

    Queries raise GatewayError; callers decide how to degrade.
    """

    def __init__(
        self, client: docker.APIClient, clock: Callable[[], float] = time.time
    ) -> None:
        """
        Initialize the DockerGateway.

        Args:
            client: Connected low-level Docker API client.
            clock: Returns the current epoch time, used for container uptimes.
        """
        self._client = client
        self._clock = clock

    def list_containers(self, include_stopped: bool = True) -> list[ContainerInfo]:
        """List containers known to the daemon."""
        try:
            raw = self._client.containers(all=include_stopped)
        except (docker.errors.DockerException, requests.RequestException) as e:
            raise GatewayError(f"listing containers: {e}") from e

        containers = []
        for entry in raw:
            names = entry.get("Names") or [""]
            containers.append(
                ContainerInfo(
                    id=entry["Id"],
                    name=names[0],
                    image=entry.get("Image", ""),
                    command=entry.get("Command", ""),
                    created=float(entry.get("Created", 0)),
                    status=entry.get("Status", ""),
                )
            )
        return containers

    def list_processes(self, container_id: str) -> list[ProcessRow]:
        """List the processes running in a container."""
        try:
            top = self._client.top(container_id, ps_args=PS_ARGS)
        except (docker.errors.DockerException, requests.RequestException) as e:
            raise GatewayError(f"listing processes of {container_id[:12]}: {e}") from e

        rows: list[ProcessRow] = []
        for proc in top.get("Processes") or []:
            if len(proc) < 5:
                continue
            rows.append((proc[0], proc[1], proc[2], proc[3], " ".join(proc[4:])))
        return rows

    def uptime(self, info: ContainerInfo) -> str:
        """Human readable age of a listed container."""
        return human_duration(max(0.0, self._clock() - info.created))

    def run_action(self, action: Action, container_id: str) -> None:
        """Run a lifecycle command against a container and wait for it."""
        commands = {
            Action.START: self._client.start,
            Action.STOP: self._client.stop,
            Action.KILL: self._client.kill,
            Action.PAUSE: self._client.pause,
            Action.UNPAUSE: self._client.unpause,
            Action.REMOVE: self._client.remove_container,
        }
        try:
            commands[action](container_id)
        except (docker.errors.DockerException, requests.RequestException) as e:
            raise GatewayError(f"{action.value} {container_id[:12]}: {e}") from e
