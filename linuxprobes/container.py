"""Running Docker/Podman containers and their memory usage."""

from __future__ import annotations

import http.client
import os
import socket as _socket
from collections.abc import Callable
from urllib.parse import quote

from .collection import Counter
from .json_helpers import search, token_streq, token_tostr, tokenise
from .messages import PluginError, Status

DEFAULT_API_VERSION = "1.24"  # API versions before v1.24 are deprecated
_RUNNING_FILTER = '{"status":{"running":true}}'
_USER_AGENT = "linuxprobes-agent/1.0"
_UNIX_SCHEME = "unix://"


class _UnixHTTPConnection(http.client.HTTPConnection):
    """An HTTP connection carried over a Unix domain socket."""

    def __init__(self, host: str, socket_path: str) -> None:
        super().__init__(host)
        self._socket_path = socket_path

    def connect(self) -> None:
        sock = _socket.socket(_socket.AF_UNIX, _socket.SOCK_STREAM)
        try:
            sock.connect(self._socket_path)
        except OSError:
            sock.close()
            raise
        self.sock = sock


class DockerClient:
    """A minimal client for the Docker/Podman REST API on a Unix socket."""

    def __init__(self, socket: str | None = None, api_version: str | None = None) -> None:
        if socket is None:
            socket = os.environ.get("DOCKER_HOST")
            if not socket:
                raise PluginError(
                    Status.UNKNOWN,
                    "the socket path was not set, nor was the environment "
                    "variable DOCKER_HOST",
                )
        if socket.startswith(_UNIX_SCHEME):
            socket = socket[len(_UNIX_SCHEME):]
        self.socket = socket
        if api_version is None:
            api_version = os.environ.get("DOCKER_API_VERSION") or DEFAULT_API_VERSION
        self.api_version = api_version

    def get(self, path: str) -> str:
        """Send a GET request for ``path`` and return the response body."""
        conn = _UnixHTTPConnection(f"v{self.api_version}", self.socket)
        try:
            conn.request("GET", path, headers={"User-Agent": _USER_AGENT})
            body = conn.getresponse().read()
        except (OSError, http.client.HTTPException) as exc:
            raise PluginError(
                Status.UNKNOWN, str(exc) or type(exc).__name__,
                getattr(exc, "errno", 0) or 0,
            ) from exc
        finally:
            conn.close()
        return body.decode("utf-8", errors="replace")

    def running_containers_json(self) -> str:
        """Return the JSON list of the running containers."""
        return self.get("/containers/json?filters=" + quote(_RUNNING_FILTER, safe=""))

    def container_stats_json(self, container_id: str) -> str:
        """Return a single JSON statistics sample of one container."""
        return self.get(f"/containers/{container_id}/stats?stream=false")


def image_shortname(image: str) -> str:
    """Return the last path component of a container image name.

    ``"prom/prometheus:v2.39.0"`` becomes ``"prometheus:v2.39.0"``.
    """
    return image.rpartition("/")[2]


def json_parser_search(
    text: str,
    token: str,
    convert: Callable[[str], str] | None = None,
    increment: int = 1,
) -> Counter:
    """Count the values that follow every ``token`` string in ``text``.

    ``convert``, when given, is applied to each value before counting.
    """
    try:
        tokens = tokenise(text)
    except ValueError as exc:
        raise PluginError(
            Status.UNKNOWN, f'unable to parse the json data for "{token}"s'
        ) from exc

    counter = Counter()
    for current, following in zip(tokens[1:], tokens[2:]):
        if token_streq(text, current, token):
            value = token_tostr(text, following)
            counter.put(convert(value) if convert else value, increment)
    return counter


def count_running_containers(text: str, image: str | None = None) -> tuple[int, str]:
    """Return the number of containers in ``text`` and the matching perfdata.

    With ``image`` only the containers of that image are counted; otherwise
    all of them are, with one perfdata item per image and a total.
    """
    counter = json_parser_search(text, "Image", image_shortname, 1)

    if image:
        count = counter.lookup(image) or 0
        return count, f"containers_{image_shortname(image)}={count}"

    items = [
        f"containers_{image_shortname(key)}={value} " for key, value in counter.items()
    ]
    total = counter.elements()
    return total, "".join(items) + f"containers_total={total}"


def running_containers(
    socket: str | None = None, image: str | None = None
) -> tuple[int, str]:
    """Ask the container engine for its running containers and count them."""
    client = DockerClient(socket)
    return count_running_containers(client.running_containers_json(), image)


def container_memory_usage(text: str) -> int:
    """Return the memory usage, in bytes, found in a container stats sample."""
    try:
        value = search(text, ".memory_stats.usage")
    except ValueError as exc:
        raise PluginError(
            Status.UNKNOWN, f"failed to convert container memory value: {exc}"
        ) from exc
    if value is None:
        raise PluginError(
            Status.UNKNOWN, "failed to convert container memory value: not found"
        )
    try:
        usage = int(value.strip())
    except ValueError as exc:
        raise PluginError(
            Status.UNKNOWN, f"failed to convert container memory value: {value!r}"
        ) from exc
    if usage < 0:
        raise PluginError(
            Status.UNKNOWN, f"failed to convert container memory value: {value!r}"
        )
    return usage


def running_containers_memory(socket: str | None = None) -> int:
    """Return the memory used by all running containers, in kB."""
    client = DockerClient(socket)
    ids = json_parser_search(client.running_containers_json(), "Id")
    return sum(
        container_memory_usage(client.container_stats_json(container_id)) >> 10
        for container_id in ids.keys()
    )