"""
Wire models for the control-plane objects this package exchanges.

Only the fields read or written here are modelled. The API server returns
many more (managedFields, resourceVersion, ...); they are ignored.
"""

from __future__ import annotations

from pydantic import Field

from genesis_kit.types import CamelModel


class ObjectMeta(CamelModel):
    """Identity and annotations of a namespaced object."""

    name: str | None = None
    namespace: str | None = None
    annotations: dict[str, str] | None = None


class ConfigMap(CamelModel):
    """Non-secret key/value object."""

    api_version: str = "v1"
    kind: str = "ConfigMap"
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    data: dict[str, str] | None = None
    immutable: bool | None = None

    @property
    def name(self) -> str | None:
        """Object name, if the server returned one."""
        return self.metadata.name

    def annotation(self, key: str) -> str | None:
        """Look up one annotation value."""
        return (self.metadata.annotations or {}).get(key)


class Secret(CamelModel):
    """
    Secret key/value object.

    Values are sent through `stringData` so the server does the base64
    encoding.
    """

    api_version: str = "v1"
    kind: str = "Secret"
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    string_data: dict[str, str] | None = None
    type: str = "Opaque"


class ListMeta(CamelModel):
    """Pagination metadata of a list response."""

    continue_token: str | None = Field(default=None, alias="continue")
    """Opaque token for the next page. Absent or empty on the last page."""

    resource_version: str | None = None


class ConfigMapList(CamelModel):
    """One page of ConfigMaps."""

    items: list[ConfigMap] = Field(default_factory=list)
    metadata: ListMeta = Field(default_factory=ListMeta)

    @property
    def next_token(self) -> str | None:
        """Continuation token, with empty strings treated as the last page."""
        return self.metadata.continue_token or None


class SecretList(CamelModel):
    """One page of Secrets. Only the count is used."""

    items: list[Secret] = Field(default_factory=list)
