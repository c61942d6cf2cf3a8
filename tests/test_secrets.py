import subprocess

import pytest

from cnabkit.secrets import (
    SOURCE_COMMAND,
    SOURCE_ENV,
    SOURCE_PATH,
    SOURCE_VALUE,
    HostSecretStore,
    SecretStore,
)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "someconfig.txt"
    path.write_text("serval\n")
    return path


def test_run_program():
    store = HostSecretStore()
    assert store.resolve(SOURCE_COMMAND, "echo wildebeest").strip() == "wildebeest"


def test_use_var(monkeypatch):
    monkeypatch.setenv("TEST_USE_VAR", "kakapu")
    assert HostSecretStore().resolve(SOURCE_ENV, "TEST_USE_VAR").strip() == "kakapu"


def test_read_file(config_file):
    assert HostSecretStore().resolve(SOURCE_PATH, str(config_file)).strip() == "serval"


def test_plain_value():
    assert HostSecretStore().resolve(SOURCE_VALUE, "cassowary") == "cassowary"


def test_invalid_source():
    with pytest.raises(ValueError) as excinfo:
        HostSecretStore().resolve("cmd", "kv get something")
    assert str(excinfo.value) == "invalid value source: cmd"


def test_key_name_is_case_insensitive():
    assert HostSecretStore().resolve("VALUE", "cassowary") == "cassowary"


def test_missing_env_var(monkeypatch):
    monkeypatch.delenv("TEST_MISSING_VAR", raising=False)
    with pytest.raises(LookupError):
        HostSecretStore().resolve(SOURCE_ENV, "TEST_MISSING_VAR")


def test_path_expands_environment(monkeypatch, config_file):
    monkeypatch.setenv("TEST_CONFIG_DIR", str(config_file.parent))
    result = HostSecretStore().resolve(SOURCE_PATH, "$TEST_CONFIG_DIR/someconfig.txt")
    assert result.strip() == "serval"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        HostSecretStore().resolve(SOURCE_PATH, str(tmp_path / "absent.txt"))


def test_failing_command():
    with pytest.raises(subprocess.CalledProcessError):
        HostSecretStore().resolve(SOURCE_COMMAND, "false")


def test_secret_store_is_abstract():
    with pytest.raises(TypeError):
        SecretStore()