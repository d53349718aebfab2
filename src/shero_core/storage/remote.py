"""Remote store: Supabase tables over the PostgREST HTTP API.

Tables (identifier is the primary key everywhere):

  menu_items(id, name, category, price, my_share, shero_share)
  sales(id, date, menu_item_id, item_name, category, quantity,
        total_amount, total_my_share, total_shero_share, notes)
  expenses(id, date, category, amount, notes)

Upserts are insert-or-replace by id (``Prefer: resolution=merge-duplicates``).
Mutations are never retried: a failure is raised to the caller, which
aborts the in-memory update.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from shero_core.config import DEFAULT_RETRIES, DEFAULT_TIMEOUT, RemoteConfig
from shero_core.exceptions import ConfigError, RemoteStoreError
from shero_core.models import Entity, Record
from shero_core.storage.base import ConnectionCheck, GatewayState, PersistenceGateway
from shero_core.storage.schema import from_remote, to_remote

logger = logging.getLogger(__name__)

REST_PREFIX = "/rest/v1"
PAGE_SIZE = 1000


# --- HTTP resiliency ---
def make_session(
    timeout: float = DEFAULT_TIMEOUT, retries: int = DEFAULT_RETRIES
) -> requests.Session:
    """Create a requests Session with read-only retries and a default timeout.

    Configures the session with:
    - Retry adapter for HTTP/HTTPS with exponential backoff, limited to
      GET/HEAD so that writes are attempted exactly once
    - Default timeout for all requests
    - Retries on 429, 500, 502, 503, 504 status codes

    Args:
        timeout: Default timeout in seconds for all requests.
        retries: Number of retry attempts for reads (0 disables retries).

    Returns:
        Configured requests.Session object.
    """
    s = requests.Session()
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=0.8,  # 0.8, 1.6, 3.2, ...
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET", "HEAD"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    # Default timeouts via a wrapper
    orig_request = s.request

    def timed_request(method: str, url: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return orig_request(method, url, **kwargs)

    s.request = timed_request  # type: ignore[method-assign,assignment]
    return s


def _error_detail(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:400]
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body.get("hint") or body)[:400]
    return str(body)[:400]


def ensure_ok(resp: requests.Response, msg: str) -> None:
    """Raise RemoteStoreError if the HTTP response is not successful."""
    if not resp.ok:
        raise RemoteStoreError(f"{msg}. HTTP {resp.status_code}: {_error_detail(resp)}")


class SupabaseClient:
    """Minimal table client for a Supabase project.

    Example:
        >>> client = SupabaseClient(RemoteConfig(url="https://xyz.supabase.co", key="..."))
        >>> client.select("menu_items", columns="id", limit=1)
        [{'id': '1'}]
    """

    def __init__(
        self,
        config: RemoteConfig,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
    ) -> None:
        """Build the client; no network traffic happens here.

        Raises:
            ConfigError: If the URL is not an http(s) URL or the key is empty.
        """
        parsed = urlparse(config.url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(f"Invalid remote store URL: {config.url!r}")
        if not config.key:
            raise ConfigError("Remote store key is empty")

        self.base_url = config.url.rstrip("/") + REST_PREFIX
        self.session = session or make_session(timeout=timeout, retries=retries)
        self.session.headers.update(
            {
                "apikey": config.key,
                "Authorization": f"Bearer {config.key}",
                "Content-Type": "application/json",
            }
        )

    def _url(self, table: str) -> str:
        return f"{self.base_url}/{table}"

    def _call(self, method: str, table: str, msg: str, **kwargs: Any) -> requests.Response:
        try:
            resp = self.session.request(method, self._url(table), **kwargs)
        except requests.RequestException as e:
            raise RemoteStoreError(f"{msg}: {e}") from e
        ensure_ok(resp, msg)
        return resp

    def select(
        self,
        table: str,
        columns: str = "*",
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"select": columns}
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = limit
        if offset:
            params["offset"] = offset
        resp = self._call("GET", table, f"Select from {table} failed", params=params)
        try:
            rows = resp.json()
        except ValueError as e:
            raise RemoteStoreError(f"Select from {table} returned invalid JSON") from e
        if not isinstance(rows, list):
            raise RemoteStoreError(f"Select from {table} returned {type(rows).__name__}, expected a list")
        return rows

    def select_all(self, table: str, page_size: int = PAGE_SIZE) -> list[dict[str, Any]]:
        """Fetch every row, paging past the server's row cap.

        Pages are ordered by id so offsets stay stable between requests.
        """
        rows: list[dict[str, Any]] = []
        while True:
            page = self.select(table, limit=page_size, offset=len(rows), order="id.asc")
            rows.extend(page)
            if len(page) < page_size:
                return rows

    def upsert(self, table: str, row: dict[str, Any]) -> None:
        self._call(
            "POST",
            table,
            f"Upsert into {table} failed (id={row.get('id')!r})",
            json=row,
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )

    def delete(self, table: str, record_id: str) -> None:
        self._call(
            "DELETE",
            table,
            f"Delete from {table} failed (id={record_id!r})",
            params={"id": f"eq.{record_id}"},
        )

    def close(self) -> None:
        self.session.close()


class RemoteGateway(PersistenceGateway):
    """Gateway that treats the remote store as the store of record."""

    def __init__(self, client: SupabaseClient) -> None:
        self.client = client
        self.state = GatewayState.REMOTE_ACTIVE

    def load(self, entity: Entity) -> list[Record]:
        rows = self.client.select_all(entity.value)
        logger.info("Loaded %d %s row(s) from the remote store", len(rows), entity.value)
        return [from_remote(entity, row) for row in rows]

    def write(self, entity: Entity, record: Record) -> None:
        self.client.upsert(entity.value, to_remote(record))
        logger.debug("Upserted %s %s", entity.value, record.id)

    def remove(self, entity: Entity, record_id: str) -> None:
        self.client.delete(entity.value, record_id)
        logger.debug("Deleted %s %s", entity.value, record_id)

    def snapshot(self, entity: Entity, records: Sequence[Record]) -> None:
        # Each mutation was already confirmed by the remote store.
        pass

    def test_connection(self) -> ConnectionCheck:
        return probe(self.client)

    def close(self) -> None:
        self.client.close()


def probe(client: SupabaseClient) -> ConnectionCheck:
    """Fetch at most one menu item id to verify reachability and permissions."""
    try:
        client.select(Entity.MENU_ITEMS.value, columns="id", limit=1)
    except RemoteStoreError as e:
        logger.warning("Connection test failed: %s", e)
        return ConnectionCheck(success=False, message=str(e) or "Unknown connection error")
    return ConnectionCheck(success=True, message="Connection Successful!")
