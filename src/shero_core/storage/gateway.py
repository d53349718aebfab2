"""Store selection at startup.

``uninitialized -> probing -> remote-active | local-active``

Selection happens once per process. Failing to reach the remote store is
not an error: the gateway degrades to local storage and logs why.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from shero_core.config import DEFAULT_RETRIES, DEFAULT_TIMEOUT, DataPaths, RemoteConfig, Settings
from shero_core.exceptions import ConfigError
from shero_core.storage.base import ConnectionCheck, GatewayState, PersistenceGateway
from shero_core.storage.local import LocalGateway, LocalStore
from shero_core.storage.remote import RemoteGateway, SupabaseClient, probe

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., SupabaseClient]


class StoreSelector:
    """Walks the store-selection lifecycle once.

    ``state`` starts at UNINITIALIZED, is PROBING while a remote client is
    built and tested, and ends at the chosen gateway's state.

    Args:
        settings: Resolved settings (remote configuration, probe flag, HTTP options).
        paths: DataPaths for the local fallback store.
        client_factory: Builds the remote client from a RemoteConfig; tests
            pass a fake. Defaults to SupabaseClient.
    """

    def __init__(
        self,
        settings: Settings,
        paths: DataPaths,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.settings = settings
        self.paths = paths
        self.client_factory = client_factory or SupabaseClient
        self.state = GatewayState.UNINITIALIZED
        self.gateway: Optional[PersistenceGateway] = None

    def _resolve(self, gateway: PersistenceGateway) -> PersistenceGateway:
        self.gateway = gateway
        self.state = gateway.state
        logger.debug("Store selection: %s", self.state.value)
        return gateway

    def _local(self) -> PersistenceGateway:
        return self._resolve(LocalGateway(LocalStore(self.paths)))

    def select(self) -> PersistenceGateway:
        """Choose the store of record.

        Returns:
            A RemoteGateway when the remote store is configured and reachable,
            otherwise a LocalGateway. Calling again returns the same gateway.
        """
        if self.gateway is not None:
            return self.gateway

        remote: Optional[RemoteConfig] = self.settings.remote
        if remote is None:
            logger.info("No remote store configured; data is saved only on this device")
            return self._local()

        self.state = GatewayState.PROBING
        try:
            client = self.client_factory(remote, timeout=self.settings.timeout, retries=self.settings.retries)
        except (ConfigError, ValueError) as e:
            logger.warning("Could not initialize the remote store client (%s); using local storage", e)
            return self._local()

        if self.settings.probe_on_startup:
            check = probe(client)
            if not check.success:
                logger.warning("Remote store unreachable (%s); using local storage", check.message)
                client.close()
                return self._local()

        logger.info("Connected to the remote store at %s (config from %s)", remote.url, remote.source)
        return self._resolve(RemoteGateway(client))


def open_gateway(
    settings: Settings,
    paths: DataPaths,
    client_factory: Optional[ClientFactory] = None,
) -> PersistenceGateway:
    """Choose the store of record; see :class:`StoreSelector`."""
    return StoreSelector(settings, paths, client_factory=client_factory).select()


def check_remote_config(
    remote: RemoteConfig,
    timeout: float = DEFAULT_TIMEOUT,
    retries: int = DEFAULT_RETRIES,
    client_factory: Optional[ClientFactory] = None,
) -> ConnectionCheck:
    """Probe a remote configuration without selecting it as the store of record."""
    factory = client_factory or SupabaseClient
    try:
        client = factory(remote, timeout=timeout, retries=retries)
    except (ConfigError, ValueError) as e:
        return ConnectionCheck(success=False, message=str(e))
    try:
        return probe(client)
    finally:
        client.close()
