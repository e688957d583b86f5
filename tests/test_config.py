"""Tests for ClientSettings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from curlwrap import ClientSettings


class TestClientSettings:
    """Tests for ClientSettings."""

    def test_default_settings(self):
        settings = ClientSettings(host="http://site.ru/")
        assert settings.host == "http://site.ru/"
        assert settings.show_headers is None
        assert settings.network.verify_tls is True
        assert settings.network.proxy is None
        assert settings.query.method == "GET"
        assert settings.log_level == "WARNING"

    def test_host_required(self):
        with pytest.raises(ValidationError):
            ClientSettings()

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            ClientSettings(host="http://site.ru", unknown=True)

    def test_invalid_method(self):
        with pytest.raises(ValidationError):
            ClientSettings(host="http://site.ru", query={"method": "DELETE"})

    def test_negative_timeout_rejected(self):
        with pytest.raises(ValidationError):
            ClientSettings(host="http://site.ru", network={"timeout": -1})

    def test_cookie_env_expansion(self, monkeypatch):
        """Test that $VAR references in the cookie are expanded."""
        monkeypatch.setenv("SESSION_ID", "abc123")
        settings = ClientSettings(host="http://site.ru", cookies={"cookie": "sid=${SESSION_ID}"})
        assert settings.cookies.cookie == "sid=abc123"

    def test_unknown_env_var_left_alone(self, monkeypatch):
        monkeypatch.delenv("CURLWRAP_MISSING", raising=False)
        settings = ClientSettings(host="http://site.ru", cookies={"cookie": "sid=$CURLWRAP_MISSING"})
        assert settings.cookies.cookie == "sid=$CURLWRAP_MISSING"

    def test_to_yaml(self):
        settings = ClientSettings(host="http://site.ru", show_headers=True)
        yaml_str = settings.to_yaml()
        assert "host: http://site.ru" in yaml_str
        assert "show_headers: true" in yaml_str

    def test_from_yaml(self):
        yaml_str = """
host: http://site.ru/
show_headers: true
headers:
  X-Requested-With: XMLHttpRequest
network:
  follow_redirects: true
  proxy: auto
cookies:
  jar: ./cookies/site.txt
"""
        settings = ClientSettings.from_yaml(yaml_str)
        assert settings.show_headers is True
        assert settings.headers == {"X-Requested-With": "XMLHttpRequest"}
        assert settings.network.follow_redirects is True
        assert settings.network.proxy == "auto"
        assert settings.cookies.jar == Path("./cookies/site.txt")

    def test_from_yaml_file(self, tmp_path):
        path = tmp_path / "site.yaml"
        path.write_text("host: http://site.ru\nreferer: http://site.ru/\n")
        settings = ClientSettings.from_yaml_file(path)
        assert settings.referer == "http://site.ru/"
