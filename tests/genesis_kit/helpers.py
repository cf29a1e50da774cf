"""Shared test data and an in-memory store double."""

from __future__ import annotations

from genesis_kit.nodes import IndexedNode, NodeKey
from genesis_kit.store import ConfigMap, ConfigMapList, ListMeta, ObjectMeta, Secret
from genesis_kit.types import StoreStatusError

# EIP-55 reference vectors.
FAUCET_ADDRESS = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
VALIDATOR_ADDRESSES = (
    "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359",
    "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB",
)
EXTRA_ADDRESS = "0xD1220A0cf47c7B9Be7A2E6BA89F429762e7b9aDb"


def public_key(seed: int) -> str:
    """Uncompressed-looking public key: `0x04` plus 64 bytes."""
    return "0x04" + f"{seed:02x}" * 64


def make_node_key(address: str, seed: int) -> NodeKey:
    return NodeKey(
        address=address,
        public_key=public_key(seed),
        private_key="0x" + f"{seed:02x}" * 32,
        enode=public_key(seed)[4:],
    )


def make_validator(index: int, address: str) -> IndexedNode:
    key = make_node_key(address, 0x10 + index)
    return IndexedNode(**key.model_dump(), index=index)


def annotated_config_map(name: str, annotation: str | None, data: dict[str, str]) -> ConfigMap:
    annotations = {"settlemint.com/artifact": annotation} if annotation else None
    return ConfigMap(metadata=ObjectMeta(name=name, annotations=annotations), data=data)


def page(items: list[ConfigMap], next_token: str | None = None) -> ConfigMapList:
    return ConfigMapList(items=items, metadata=ListMeta(continue_token=next_token))


class FakeStore:
    """
    Scriptable in-memory store.

    - Created objects are kept by name; creating an existing name answers 409.
    - `create_errors` forces an error for a given name.
    - `list_pages` scripts successive `list_config_maps` responses. An
      exception in the script is raised instead of returned. Once the
      script is exhausted, all stored ConfigMaps are returned as one page.
    - `probe_error` makes `list_secrets` fail.
    - `list_calls` and `secret_list_calls` record every list request.
    """

    def __init__(self, namespace: str = "test-ns") -> None:
        self.namespace = namespace
        self.config_maps: dict[str, ConfigMap] = {}
        self.secrets: dict[str, Secret] = {}
        self.create_errors: dict[str, Exception] = {}
        self.list_pages: list[ConfigMapList | Exception] = []
        self.list_calls: list[tuple[int, str | None]] = []
        self.secret_list_calls: list[int] = []
        self.probe_error: Exception | None = None
        self.created: list[str] = []

    def _check_create(self, name: str, kind: str, existing: dict) -> None:
        if name in self.create_errors:
            raise self.create_errors[name]
        if name in existing:
            raise StoreStatusError(
                StoreStatusError.CONFLICT,
                f"create {kind}",
                object_name=name,
                reason="already exists",
            )

    async def create_config_map(self, config_map: ConfigMap) -> ConfigMap:
        name = config_map.metadata.name
        self._check_create(name, "ConfigMap", self.config_maps)
        self.config_maps[name] = config_map
        self.created.append(name)
        return config_map

    async def list_config_maps(
        self, *, limit: int, continue_token: str | None = None
    ) -> ConfigMapList:
        self.list_calls.append((limit, continue_token))
        if self.list_pages:
            response = self.list_pages.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return page(list(self.config_maps.values())[:limit])

    async def read_config_map(self, name: str) -> ConfigMap | None:
        return self.config_maps.get(name)

    async def create_secret(self, secret: Secret) -> Secret:
        name = secret.metadata.name
        self._check_create(name, "Secret", self.secrets)
        self.secrets[name] = secret
        self.created.append(name)
        return secret

    async def list_secrets(self, *, limit: int) -> int:
        self.secret_list_calls.append(limit)
        if self.probe_error is not None:
            raise self.probe_error
        return min(limit, len(self.secrets))
