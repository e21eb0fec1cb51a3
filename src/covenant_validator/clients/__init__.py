"""
Read-only collaborators consulted during a validation run.

``Collaborators`` bundles one client per external source behind a single
shared HTTP session. Validators only talk to this bundle, so tests can
hand in fakes with the same method names.

Public API::

    from covenant_validator.clients import Collaborators

    with Collaborators.from_config() as services:
        path = services.registry.get_path_info("cosmoshub", "neutron")
        height = services.neutron.get_latest_block_height()
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from covenant_validator.clients.astroport import AstroportClient, PairInfo, PoolInfo
from covenant_validator.clients.http import ApiClient
from covenant_validator.clients.neutron import NeutronClient
from covenant_validator.clients.registry import (
    AssetInfo,
    ChainInfo,
    ChainRegistryClient,
    IBCPath,
)
from covenant_validator.clients.releases import ReleaseClient
from covenant_validator.config import ValidatorConfig, get_config


class Collaborators:
    """One validation run's view of the outside world."""

    def __init__(
        self,
        registry: Any,
        astroport: Any,
        neutron: Any,
        releases: Any,
        api: Optional[ApiClient] = None,
    ) -> None:
        self.registry = registry
        self.astroport = astroport
        self.neutron = neutron
        self.releases = releases
        self._api = api

    @classmethod
    def from_config(
        cls,
        config: Optional[ValidatorConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "Collaborators":
        config = config or get_config()
        api = ApiClient(
            timeout_seconds=config.http_timeout_seconds,
            user_agent=config.user_agent,
            transport=transport,
        )
        return cls(
            registry=ChainRegistryClient(
                api,
                raw_url=config.chain_registry_raw_url,
                ref=config.chain_registry_ref,
                directory_url=config.cosmos_directory_url,
            ),
            astroport=AstroportClient(api, config.neutron_lcd_url),
            neutron=NeutronClient(api, config.neutron_rpc_url),
            releases=ReleaseClient(api, config.release_manifest_url),
            api=api,
        )

    def __enter__(self) -> "Collaborators":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        if self._api is not None:
            self._api.close()


__all__ = [
    "ApiClient",
    "AssetInfo",
    "AstroportClient",
    "ChainInfo",
    "ChainRegistryClient",
    "Collaborators",
    "IBCPath",
    "NeutronClient",
    "PairInfo",
    "PoolInfo",
    "ReleaseClient",
]
