"""
Kubernetes implementation of the control-plane store.

Talks to the API server's core/v1 REST endpoints with an async httpx
client. Inside a pod, credentials come from the mounted service account:

- `token`: bearer token for the Authorization header
- `ca.crt`: CA bundle for the API server certificate
- `namespace`: the namespace the pod runs in

The connection and namespace live in an explicit `ClusterContext` that is
passed to the store, so tests can hand in a client backed by
`httpx.MockTransport`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from genesis_kit import config
from genesis_kit.types import StoreConnectionError, StoreResponseError, StoreStatusError

from .models import ConfigMap, ConfigMapList, Secret, SecretList

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
"""HTTP request timeout in seconds."""

_CORE_V1 = "/api/v1/namespaces/{namespace}"

_Model = TypeVar("_Model", bound=BaseModel)


@dataclass(frozen=True, slots=True)
class ClusterContext:
    """Authenticated API client and the namespace it operates in."""

    client: httpx.AsyncClient
    """Client with base URL and credentials already configured."""

    namespace: str
    """Namespace every call is scoped to."""

    @classmethod
    def from_service_account(
        cls,
        service_account_dir: Path | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> ClusterContext:
        """
        Build a context from in-cluster service account credentials.

        Raises:
            StoreConnectionError: If not running inside a cluster or the
                namespace cannot be determined.
        """
        directory = service_account_dir or config.SERVICE_ACCOUNT_DIR
        host = os.environ.get("KUBERNETES_SERVICE_HOST")
        port = os.environ.get("KUBERNETES_SERVICE_PORT", "443")
        token_path = directory / "token"

        if not host or not token_path.is_file():
            raise StoreConnectionError(
                "Kubernetes output requires running inside a cluster "
                "with service account credentials."
            )

        try:
            namespace = (directory / "namespace").read_text(encoding="utf-8").strip()
        except OSError as e:
            raise StoreConnectionError(
                "Unable to determine Kubernetes namespace from service account credentials."
            ) from e
        if not namespace:
            raise StoreConnectionError("Kubernetes namespace could not be determined.")

        ca_path = directory / "ca.crt"
        token = token_path.read_text(encoding="utf-8").strip()

        # IPv6 service hosts must be bracketed in URLs.
        if ":" in host:
            host = f"[{host}]"

        client = httpx.AsyncClient(
            base_url=f"https://{host}:{port}",
            headers={"Authorization": f"Bearer {token}"},
            verify=str(ca_path) if ca_path.is_file() else True,
            timeout=timeout,
        )
        return cls(client=client, namespace=namespace)


class KubernetesStore:
    """ConfigMap and Secret access for one namespace."""

    def __init__(self, context: ClusterContext) -> None:
        self._context = context
        self._prefix = _CORE_V1.format(namespace=context.namespace)

    @property
    def namespace(self) -> str:
        """Namespace all calls operate in."""
        return self._context.namespace

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._context.client.aclose()

    async def __aenter__(self) -> KubernetesStore:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def create_config_map(self, config_map: ConfigMap) -> ConfigMap:
        """Create a ConfigMap. Raises StoreStatusError(409) if it exists."""
        response = await self._request(
            "POST",
            f"{self._prefix}/configmaps",
            operation="create ConfigMap",
            object_name=config_map.name,
            json=_to_wire(config_map),
        )
        return _decode(response, ConfigMap, "create ConfigMap", config_map.name)

    async def list_config_maps(
        self,
        *,
        limit: int,
        continue_token: str | None = None,
    ) -> ConfigMapList:
        """List one page of ConfigMaps."""
        params: dict[str, Any] = {"limit": limit}
        if continue_token:
            params["continue"] = continue_token

        response = await self._request(
            "GET",
            f"{self._prefix}/configmaps",
            operation="list ConfigMaps",
            params=params,
        )
        return _decode(response, ConfigMapList, "list ConfigMaps")

    async def read_config_map(self, name: str) -> ConfigMap | None:
        """Read a ConfigMap by name, returning None when it does not exist."""
        try:
            response = await self._request(
                "GET",
                f"{self._prefix}/configmaps/{name}",
                operation="read ConfigMap",
                object_name=name,
            )
        except StoreStatusError as e:
            if e.is_not_found:
                return None
            raise
        return _decode(response, ConfigMap, "read ConfigMap", name)

    async def create_secret(self, secret: Secret) -> Secret:
        """Create a Secret. Raises StoreStatusError(409) if it exists."""
        response = await self._request(
            "POST",
            f"{self._prefix}/secrets",
            operation="create Secret",
            object_name=secret.metadata.name,
            json=_to_wire(secret),
        )
        return _decode(response, Secret, "create Secret", secret.metadata.name)

    async def list_secrets(self, *, limit: int) -> int:
        """List one page of Secrets and return how many came back."""
        response = await self._request(
            "GET",
            f"{self._prefix}/secrets",
            operation="list Secrets",
            params={"limit": limit},
        )
        return len(_decode(response, SecretList, "list Secrets").items)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        object_name: str | None = None,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            response = await self._context.client.request(method, path, params=params, json=json)
        except httpx.RequestError as exc:
            raise StoreConnectionError(f"{operation} failed: network error: {exc}") from exc

        if response.is_error:
            raise StoreStatusError(
                response.status_code,
                operation,
                object_name=object_name,
                reason=_error_reason(response),
            )

        logger.debug("%s %s -> %d", method, path, response.status_code)
        return response


def _decode(
    response: httpx.Response,
    model: type[_Model],
    operation: str,
    object_name: str | None = None,
) -> _Model:
    """Validate a response body, reporting garbage as a store failure."""
    try:
        return model.model_validate_json(response.content)
    except ValidationError as exc:
        raise StoreResponseError(
            operation, f"{exc.error_count()} validation error(s)", object_name=object_name
        ) from exc


def _to_wire(obj: ConfigMap | Secret) -> dict[str, Any]:
    return obj.model_dump(mode="json", by_alias=True, exclude_none=True)


def _error_reason(response: httpx.Response) -> str:
    """Pull the message out of a Status body, falling back to raw text."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return response.text[:200]
