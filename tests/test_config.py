"""Tests for configuration loading."""

from pathlib import Path

import pytest

from teams_provision.config import (
    GRAPH_BASE_URL,
    AppConfig,
    ConfigError,
    GraphConfig,
    ProvisionSettings,
    load_config,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in (
        "GRAPH_TENANT_ID",
        "GRAPH_CLIENT_ID",
        "GRAPH_CLIENT_SECRET",
        "PROVISION_INPUT_PATH",
        "PROVISION_SETTLE_DELAY_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)


def test_defaults():
    config = AppConfig()
    assert config.graph.base_url == GRAPH_BASE_URL
    assert config.graph.timeout == 30.0
    assert config.provision.input_path == Path("classes.csv")
    assert config.provision.error_log_path == Path("provision-errors.csv")
    assert config.provision.settle_delay_seconds == 30.0
    assert config.provision.recheck_delay_seconds == 30.0


def test_env_prefixes(monkeypatch):
    monkeypatch.setenv("GRAPH_TENANT_ID", "tenant")
    monkeypatch.setenv("PROVISION_INPUT_PATH", "in/rows.csv")
    monkeypatch.setenv("PROVISION_SETTLE_DELAY_SECONDS", "5")

    config = AppConfig()

    assert config.graph.tenant_id == "tenant"
    assert config.provision.input_path == Path("in/rows.csv")
    assert config.provision.settle_delay_seconds == 5.0


def test_missing_credentials():
    assert GraphConfig().missing() == [
        "GRAPH_TENANT_ID",
        "GRAPH_CLIENT_ID",
        "GRAPH_CLIENT_SECRET",
    ]
    assert GraphConfig(tenant_id="t", client_id="c", client_secret="s").missing() == []


def test_negative_delay_rejected():
    with pytest.raises(ValueError):
        ProvisionSettings(settle_delay_seconds=-1)


def test_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "graph:\n"
        "  tenant_id: tenant\n"
        "  client_id: client\n"
        "provision:\n"
        "  input_path: term1.csv\n"
        "  recheck_delay_seconds: 60\n"
    )
    config = load_config(path)
    assert config.graph.tenant_id == "tenant"
    assert config.provision.input_path == Path("term1.csv")
    assert config.provision.recheck_delay_seconds == 60.0


def test_from_yaml_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "nope.yaml")


def test_from_yaml_invalid(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("graph: [unclosed\n")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config(path)


def test_from_yaml_not_a_mapping(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(path)


def test_dotenv_reaches_nested_settings(tmp_path):
    (tmp_path / ".env").write_text(
        "GRAPH_TENANT_ID=from-dotenv\n"
        "PROVISION_SETTLE_DELAY_SECONDS=5\n"
        "UNRELATED_SETTING=ignored\n",
        encoding="utf-8",
    )
    config = AppConfig()
    assert config.graph.tenant_id == "from-dotenv"
    assert config.provision.settle_delay_seconds == 5.0


def test_environment_overrides_dotenv(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("GRAPH_TENANT_ID=from-dotenv\n", encoding="utf-8")
    monkeypatch.setenv("GRAPH_TENANT_ID", "from-env")
    assert AppConfig().graph.tenant_id == "from-env"
