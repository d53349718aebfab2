"""Tests for settings resolution and startup store selection."""

import json
from typing import Any

import pytest

from shero_core.config import (
    DataPaths,
    RemoteConfig,
    Settings,
    clear_remote_config,
    has_deployment_config,
    load_user_settings,
    resolve_remote_config,
    save_remote_config,
)
from shero_core.exceptions import ConfigError
from shero_core.parsing import ParseMode
from shero_core.storage import (
    GatewayState,
    LocalGateway,
    RemoteGateway,
    StoreSelector,
    check_remote_config,
    open_gateway,
)


class TestSettings:
    def test_defaults(self, test_paths: DataPaths) -> None:
        settings = Settings.from_env(test_paths, environ={})
        assert settings.remote is None
        assert settings.parse_mode is ParseMode.LENIENT
        assert settings.probe_on_startup is True
        assert settings.timeout == 30.0
        assert settings.retries == 0

    def test_env_values(self, test_paths: DataPaths) -> None:
        env = {
            "VITE_SUPABASE_URL": "https://env.supabase.co",
            "SUPABASE_ANON_KEY": "env-key",
            "SHERO_PARSE_MODE": "strict",
            "SHERO_PROBE": "no",
            "SHERO_TIMEOUT": "5",
            "SHERO_RETRIES": "2",
        }
        settings = Settings.from_env(test_paths, environ=env)
        assert settings.remote == RemoteConfig(url="https://env.supabase.co", key="env-key", source="environment")
        assert settings.parse_mode is ParseMode.STRICT
        assert settings.probe_on_startup is False
        assert settings.timeout == 5.0
        assert settings.retries == 2

    def test_invalid_value(self, test_paths: DataPaths) -> None:
        with pytest.raises(ConfigError):
            Settings.from_env(test_paths, environ={"SHERO_TIMEOUT": "soon"})
        with pytest.raises(ConfigError):
            Settings.from_env(test_paths, environ={"SHERO_PARSE_MODE": "loose"})

    def test_repr_hides_key(self) -> None:
        assert "secret" not in repr(RemoteConfig(url="https://x.supabase.co", key="secret"))


class TestRemoteConfig:
    def test_saved_settings(self, test_paths: DataPaths) -> None:
        save_remote_config(test_paths, "https://user.supabase.co", "user-key")
        remote = resolve_remote_config(test_paths, environ={})
        assert remote is not None
        assert (remote.url, remote.key, remote.source) == ("https://user.supabase.co", "user-key", "settings")
        data = json.loads(test_paths.settings_json.read_text(encoding="utf-8"))
        assert data == {"supabaseConfig": {"url": "https://user.supabase.co", "key": "user-key"}}

    def test_environment_wins_field_by_field(self, test_paths: DataPaths) -> None:
        save_remote_config(test_paths, "https://user.supabase.co", "user-key")
        remote = resolve_remote_config(test_paths, environ={"SUPABASE_URL": "https://env.supabase.co"})
        assert remote is not None
        assert remote.url == "https://env.supabase.co"
        assert remote.key == "user-key"
        assert remote.source == "environment"

    def test_url_without_key_is_not_configured(self, test_paths: DataPaths) -> None:
        assert resolve_remote_config(test_paths, environ={"SUPABASE_URL": "https://env.supabase.co"}) is None

    def test_clear(self, test_paths: DataPaths) -> None:
        assert clear_remote_config(test_paths) is False
        save_remote_config(test_paths, "https://user.supabase.co", "user-key")
        assert clear_remote_config(test_paths) is True
        assert load_user_settings(test_paths) == {}
        assert resolve_remote_config(test_paths, environ={}) is None

    def test_save_requires_both_fields(self, test_paths: DataPaths) -> None:
        with pytest.raises(ConfigError):
            save_remote_config(test_paths, "https://user.supabase.co", "")

    def test_malformed_settings_file(self, test_paths: DataPaths) -> None:
        test_paths.ensure_dirs()
        test_paths.settings_json.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_user_settings(test_paths)

    def test_deployment_config(self) -> None:
        assert has_deployment_config({"REACT_APP_SUPABASE_URL": "https://x.supabase.co"}) is True
        assert has_deployment_config({}) is False


class TestOpenGateway:
    def test_local_without_remote(self, test_paths: DataPaths) -> None:
        gateway = open_gateway(Settings(), test_paths)
        assert isinstance(gateway, LocalGateway)
        assert gateway.state is GatewayState.LOCAL_ACTIVE

    def test_remote_when_probe_succeeds(self, test_paths: DataPaths, fake_client: Any, remote_config: RemoteConfig) -> None:
        gateway = open_gateway(Settings(remote=remote_config), test_paths, client_factory=lambda cfg, **kw: fake_client)
        assert isinstance(gateway, RemoteGateway)
        assert gateway.is_remote
        assert ("select", "menu_items") in fake_client.calls

    def test_local_when_probe_fails(self, test_paths: DataPaths, fake_client: Any, remote_config: RemoteConfig) -> None:
        fake_client.reachable = False
        gateway = open_gateway(Settings(remote=remote_config), test_paths, client_factory=lambda cfg, **kw: fake_client)
        assert isinstance(gateway, LocalGateway)
        assert fake_client.closed

    def test_probe_can_be_skipped(self, test_paths: DataPaths, fake_client: Any, remote_config: RemoteConfig) -> None:
        fake_client.reachable = False
        settings = Settings(remote=remote_config, probe_on_startup=False)
        gateway = open_gateway(settings, test_paths, client_factory=lambda cfg, **kw: fake_client)
        assert gateway.is_remote
        assert fake_client.calls == []

    def test_invalid_remote_config_falls_back(self, test_paths: DataPaths) -> None:
        settings = Settings(remote=RemoteConfig(url="not a url", key="k"))
        gateway = open_gateway(settings, test_paths)
        assert isinstance(gateway, LocalGateway)

    def test_factory_receives_http_options(self, test_paths: DataPaths, fake_client: Any, remote_config: RemoteConfig) -> None:
        seen = {}

        def factory(cfg, **kwargs):
            seen.update(kwargs)
            return fake_client

        open_gateway(Settings(remote=remote_config, timeout=7.5, retries=2), test_paths, client_factory=factory)
        assert seen == {"timeout": 7.5, "retries": 2}


class TestStoreSelector:
    def test_states_while_selecting_remote(self, test_paths: DataPaths, fake_client: Any, remote_config: RemoteConfig) -> None:
        selector = StoreSelector(Settings(remote=remote_config), test_paths, client_factory=lambda cfg, **kw: fake_client)
        seen = []
        real_select = fake_client.select

        def select(*args: Any, **kwargs: Any) -> Any:
            seen.append(selector.state)
            return real_select(*args, **kwargs)

        fake_client.select = select
        assert selector.state is GatewayState.UNINITIALIZED

        gateway = selector.select()
        assert seen == [GatewayState.PROBING]
        assert selector.state is GatewayState.REMOTE_ACTIVE
        assert selector.select() is gateway

    def test_failed_probe_ends_local(self, test_paths: DataPaths, fake_client: Any, remote_config: RemoteConfig) -> None:
        fake_client.reachable = False
        selector = StoreSelector(Settings(remote=remote_config), test_paths, client_factory=lambda cfg, **kw: fake_client)
        selector.select()
        assert selector.state is GatewayState.LOCAL_ACTIVE


def test_check_remote_config(fake_client: Any, remote_config: RemoteConfig) -> None:
    check = check_remote_config(remote_config, client_factory=lambda cfg, **kw: fake_client)
    assert check.success
    assert fake_client.closed

    fake_client.reachable = False
    check = check_remote_config(remote_config, client_factory=lambda cfg, **kw: fake_client)
    assert not check.success
    assert "Invalid API key" in check.message

    bad = check_remote_config(RemoteConfig(url="nope", key="k"))
    assert not bad.success
