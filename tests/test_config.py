"""Tests for store configuration."""

import pytest
from pydantic import ValidationError

from keyv_hana import HanaSettings, HanaStoreOptions


def test_defaults():
    options = HanaStoreOptions()
    assert options.table == "KEYV"
    assert options.key_size == 255
    assert options.iteration_limit == 10
    assert options.create_table is True
    assert options.schema_name is None
    assert options.connect_options == {}


def test_schema_alias():
    assert HanaStoreOptions(schema="APP").schema_name == "APP"
    assert HanaStoreOptions(schema_name="APP").schema_name == "APP"


@pytest.mark.parametrize(("given", "expected"), [(0, 10), (-3, 10), ("abc", 10), (None, 10), ("4", 4), (25, 25)])
def test_iteration_limit_fallback(given, expected):
    assert HanaStoreOptions(iteration_limit=given).iteration_limit == expected


def test_key_size_must_be_positive():
    with pytest.raises(ValidationError):
        HanaStoreOptions(key_size=0)


def test_unknown_option_rejected():
    with pytest.raises(ValidationError):
        HanaStoreOptions(tabel="typo")


def test_password_hidden_from_repr():
    assert "secret" not in repr(HanaStoreOptions(password="secret"))


def test_connect_kwargs_only_includes_set_fields():
    assert HanaStoreOptions().connect_kwargs() == {}
    assert HanaStoreOptions(host="h", connect_options={"encrypt": True}).connect_kwargs() == {
        "encrypt": True,
        "address": "h",
    }


def test_connect_kwargs_explicit_options_win():
    options = HanaStoreOptions(user="SYSTEM", connect_options={"user": "OTHER", "sslValidateCertificate": False})
    assert options.connect_kwargs() == {"user": "SYSTEM", "sslValidateCertificate": False}


class TestHanaSettings:
    @pytest.fixture(autouse=True)
    def _isolate(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        for name in ("HOST", "PORT", "USER", "PASSWORD", "SCHEMA", "TABLE", "KEY_SIZE", "ITERATION_LIMIT", "CREATE_TABLE"):
            monkeypatch.delenv(f"HANA_{name}", raising=False)

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("HANA_HOST", "hana.example.com")
        monkeypatch.setenv("HANA_PORT", "30015")
        monkeypatch.setenv("HANA_USER", "SYSTEM")
        monkeypatch.setenv("HANA_PASSWORD", "pw")
        monkeypatch.setenv("HANA_SCHEMA", "APP")
        monkeypatch.setenv("HANA_TABLE", "CACHE")
        monkeypatch.setenv("HANA_ITERATION_LIMIT", "2")
        monkeypatch.setenv("HANA_CREATE_TABLE", "false")

        options = HanaSettings().to_options()

        assert options.host == "hana.example.com"
        assert options.port == 30015
        assert options.user == "SYSTEM"
        assert options.password == "pw"
        assert options.schema_name == "APP"
        assert options.table == "CACHE"
        assert options.iteration_limit == 2
        assert options.create_table is False

    def test_reads_dotenv(self, tmp_path):
        (tmp_path / ".env").write_text("HANA_HOST=from-dotenv\nHANA_KEY_SIZE=128\n")
        options = HanaSettings().to_options()
        assert options.host == "from-dotenv"
        assert options.key_size == 128

    def test_overrides(self):
        options = HanaSettings().to_options(table="OVERRIDE", connect_options={"encrypt": True})
        assert options.table == "OVERRIDE"
        assert options.connect_options == {"encrypt": True}

    def test_zero_limit_falls_back(self, monkeypatch):
        monkeypatch.setenv("HANA_ITERATION_LIMIT", "0")
        assert HanaSettings().to_options().iteration_limit == 10
