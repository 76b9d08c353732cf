from types import MappingProxyType
from typing import Iterable, Mapping

from llm_compare.core.errors import ModelNotFoundError
from llm_compare.providers.base import ModelClient


class ModelRegistry:
    """Read-only mapping of backend name -> ModelClient.

    Built once at startup and shared by every request, so it is never mutated.
    """

    def __init__(self, clients: Mapping[str, ModelClient]) -> None:
        self._clients = MappingProxyType(dict(clients))

    def names(self) -> frozenset[str]:
        return frozenset(self._clients)

    def has(self, name: str) -> bool:
        return name in self._clients

    def missing(self, names: Iterable[str]) -> list[str]:
        return [name for name in names if name not in self._clients]

    def resolve(self, name: str) -> ModelClient:
        try:
            return self._clients[name]
        except KeyError:
            raise ModelNotFoundError([name]) from None

    def __len__(self) -> int:
        return len(self._clients)
