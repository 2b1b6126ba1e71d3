import pytest

from clbnode.errors import ConfigurationError
from clbnode.settings import DEFAULT_AUTH_URL, Settings


def test_defaults(base_env):
    s = Settings.from_env(base_env)
    assert s.username == "deployer"
    assert s.region == "ORD"
    assert s.load_balancer_id == 4242
    assert s.app_port == 80
    assert s.servicenet_ipv4 is None
    assert s.publicnet_ipv4 is None
    assert s.auth_url == DEFAULT_AUTH_URL
    assert s.ready_timeout_s == 120
    assert s.ready_poll_s == 5


def test_overrides(base_env):
    env = dict(
        base_env,
        APP_PORT="8080",
        RAX_SERVICENET_IPV4="10.1.2.3",
        RAX_PUBLICNET_IPV4="203.0.113.9",
        OS_AUTH_URL="https://identity.example/v2.0",
        CLB_READY_TIMEOUT_S="0",
        CLB_READY_POLL_S="2",
    )
    s = Settings.from_env(env)
    assert s.app_port == 8080
    assert s.servicenet_ipv4 == "10.1.2.3"
    assert s.publicnet_ipv4 == "203.0.113.9"
    assert s.auth_url == "https://identity.example/v2.0"
    assert s.ready_timeout_s == 0
    assert s.ready_poll_s == 2


@pytest.mark.parametrize("missing", ["OS_USERNAME", "OS_PASSWORD", "OS_REGION_NAME"])
def test_missing_credentials(base_env, missing):
    env = dict(base_env)
    env[missing] = ""
    with pytest.raises(ConfigurationError, match="OS_USERNAME"):
        Settings.from_env(env)


def test_load_balancer_id_required(base_env):
    env = dict(base_env)
    del env["LOAD_BALANCER_ID"]
    with pytest.raises(ConfigurationError, match="LOAD_BALANCER_ID must be set"):
        Settings.from_env(env)


@pytest.mark.parametrize("name,value", [("LOAD_BALANCER_ID", "lb-1"), ("APP_PORT", "http"), ("APP_PORT", "70000")])
def test_malformed_integers(base_env, name, value):
    with pytest.raises(ConfigurationError):
        Settings.from_env(dict(base_env, **{name: value}))


def test_api_key_not_in_repr(settings):
    assert "s3cr3t-api-key" not in repr(settings)


def test_settings_are_immutable(settings):
    with pytest.raises(AttributeError):
        settings.app_port = 81
