"""CircleCI API client."""

import os
import time
from typing import Any, Iterator
from urllib.parse import quote

import httpx

from ._version import __version__
from .exceptions import (
    APIError,
    ConfigurationError,
    DecodeError,
    KeyNotFoundError,
    TransportError,
)
from .types import EnvironmentVariable

BASE_URL = "https://circleci.com/api/v1.1"
DEFAULT_TIMEOUT = 30.0
TOKEN_PARAM = "circle-token"
DEADLINE_EXTENSION = "circleci_env.deadline"


def _segment(value: str) -> str:
    return quote(value, safe="")


def _envvar_path(vcs_type: str, account: str, project: str, key: str | None = None) -> str:
    path = f"/project/{_segment(vcs_type)}/{_segment(account)}/{_segment(project)}/envvar"
    if key is not None:
        path = f"{path}/{_segment(key)}"
    return path


class _DeadlineStream(httpx.SyncByteStream):
    """Response body stream that fails once the request deadline has passed."""

    def __init__(self, stream: httpx.SyncByteStream, deadline: float, request: httpx.Request):
        self._stream = stream
        self._deadline = deadline
        self._request = request

    def __iter__(self) -> Iterator[bytes]:
        for chunk in self._stream:
            if time.monotonic() > self._deadline:
                raise httpx.ReadTimeout("request deadline exceeded", request=self._request)
            yield chunk

    def close(self) -> None:
        self._stream.close()


class CircleCI:
    """CircleCI API client for managing project environment variables.

    Example:
        >>> from circleci_env import CircleCI
        >>> with CircleCI(token="your-api-token") as client:
        ...     client.set_env("github", "acme", "webapp", "API_KEY", "s3cr3t")
        ...     envs = client.list_env("github", "acme", "webapp")

    The client holds no mutable state besides the underlying connection
    pool, so a single instance may be shared between threads.
    """

    def __init__(
        self,
        token: str,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the CircleCI client.

        Args:
            token: API token, sent as the ``circle-token`` query parameter.
            timeout: Overall request deadline in seconds (default: 30). Each
                phase (connect with TLS handshake, read, write, pool) is also
                bounded by it.
            base_url: Override the API base URL (default: https://circleci.com/api/v1.1).
                Also configurable via CIRCLECI_API_URL env var.
            transport: Custom httpx transport, mostly useful for testing.

        Raises:
            ConfigurationError: If the base URL cannot be parsed.
        """
        # Base URL: constructor option → env var → default
        raw_url = base_url or os.environ.get("CIRCLECI_API_URL") or BASE_URL
        try:
            url = httpx.URL(raw_url)
        except httpx.InvalidURL as e:
            raise ConfigurationError(f"invalid API base URL {raw_url!r}: {e}") from e
        if not url.scheme or not url.host:
            raise ConfigurationError(f"invalid API base URL {raw_url!r}")

        self._base_url = url
        self._timeout = timeout
        self._client = httpx.Client(
            base_url=url,
            params={TOKEN_PARAM: token},
            timeout=httpx.Timeout(timeout),
            transport=transport,
            headers={"User-Agent": f"circleci-env-python/{__version__}"},
            event_hooks={"request": [self._start_deadline], "response": [self._enforce_deadline]},
        )

    def __enter__(self) -> "CircleCI":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def _start_deadline(self, request: httpx.Request) -> None:
        request.extensions[DEADLINE_EXTENSION] = time.monotonic() + self._timeout

    def _enforce_deadline(self, response: httpx.Response) -> None:
        request = response.request
        deadline = request.extensions[DEADLINE_EXTENSION]
        if time.monotonic() > deadline:
            raise httpx.ReadTimeout("request deadline exceeded", request=request)
        # The body is read after response hooks run
        response.stream = _DeadlineStream(response.stream, deadline, request)

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    def _request(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Send a request and return the (already read and closed) response."""
        if method == "GET":
            headers = {"Accept": "application/json"}
        else:
            headers = {"Content-Type": "application/json"}
        try:
            return self._client.request(method, path, json=json, headers=headers)
        except httpx.TimeoutException as e:
            raise TransportError(f"request to CircleCI API timed out: {e}", 408) from e
        except httpx.RequestError as e:
            raise TransportError(f"failed to execute HTTP request to CircleCI API: {e}") from e

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"failed to decode HTTP response: {e}") from e

    @staticmethod
    def _to_variable(data: Any) -> EnvironmentVariable:
        try:
            return EnvironmentVariable.from_dict(data)
        except (KeyError, TypeError) as e:
            raise DecodeError(f"unexpected environment variable payload: {data!r}") from e

    # =========================================================================
    # Environment variables
    # =========================================================================

    def list_env(self, vcs_type: str, account: str, project: str) -> list[EnvironmentVariable]:
        """List environment variables with their obfuscated values.

        Obfuscation matches the CircleCI UI: ``xxxx`` followed by the last
        four characters of the actual value. Order is the one returned by
        the API.
        """
        response = self._request("GET", _envvar_path(vcs_type, account, project))
        if response.status_code != 200:
            raise APIError("unknown error, failed to list keys", response.status_code)

        data = self._decode(response)
        if not isinstance(data, list):
            raise DecodeError(f"expected a JSON array, got {type(data).__name__}")
        return [self._to_variable(item) for item in data]

    def list_env_as_dict(self, vcs_type: str, account: str, project: str) -> dict[str, str]:
        """List environment variables as a key-value dictionary."""
        envs = self.list_env(vcs_type, account, project)
        return {e.key: e.value for e in envs}

    def get_env(self, vcs_type: str, account: str, project: str, key: str) -> EnvironmentVariable:
        """Get a single environment variable (value is obfuscated by the API)."""
        response = self._request("GET", _envvar_path(vcs_type, account, project, key))
        if response.status_code == 404:
            raise KeyNotFoundError(key)
        if response.status_code != 200:
            raise APIError(f'unknown error, failed to get "{key}" key', response.status_code)

        return self._to_variable(self._decode(response))

    def set_env(self, vcs_type: str, account: str, project: str, key: str, value: str) -> None:
        """Create or update an environment variable.

        The API only answers 201 on success. The call is a plain POST with
        no idempotency key, so repeating it after a timeout may or may not
        have been applied already.
        """
        payload = EnvironmentVariable(key=key, value=value).to_dict()
        response = self._request("POST", _envvar_path(vcs_type, account, project), payload)
        # A 404 here usually means the project path is unknown
        if response.status_code == 404:
            raise KeyNotFoundError(key)
        if response.status_code != 201:
            raise APIError(f'unknown error, failed to create "{key}" key', response.status_code)

    def delete_env(self, vcs_type: str, account: str, project: str, key: str) -> None:
        """Delete an environment variable."""
        response = self._request("DELETE", _envvar_path(vcs_type, account, project, key))
        if response.status_code == 404:
            raise KeyNotFoundError(key)
        if response.status_code != 200:
            raise APIError(f'unknown error, failed to delete "{key}" key', response.status_code)
