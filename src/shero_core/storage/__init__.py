"""Persistence: the gateway interface, its two stores and startup selection.

Example:
    >>> from shero_core.config import DataPaths, Settings
    >>> from shero_core.storage import open_gateway
    >>>
    >>> paths = DataPaths.from_root("data")
    >>> gateway = open_gateway(Settings.from_env(paths), paths)
    >>> gateway.state
    <GatewayState.LOCAL_ACTIVE: 'local-active'>
"""

from shero_core.storage.base import ConnectionCheck, GatewayState, PersistenceGateway
from shero_core.storage.gateway import StoreSelector, check_remote_config, open_gateway
from shero_core.storage.local import LocalGateway, LocalStore
from shero_core.storage.remote import RemoteGateway, SupabaseClient, make_session
from shero_core.storage.schema import schema_sql

__all__ = [
    "ConnectionCheck",
    "GatewayState",
    "LocalGateway",
    "LocalStore",
    "PersistenceGateway",
    "RemoteGateway",
    "StoreSelector",
    "SupabaseClient",
    "check_remote_config",
    "make_session",
    "open_gateway",
    "schema_sql",
]
