"""
Tests for reading the proxy environment.
"""
import os

import pytest
from proxy_config import DeploymentMode, EnvSnapshot, get_deployment_mode, is_standalone, load_env_file, read_environment


def test_lower_case_wins():
    snapshot = read_environment({"https_proxy": "http://lower:1", "HTTPS_PROXY": "http://upper:1"})
    assert snapshot.https_proxy == "http://lower:1"
    assert snapshot.https_proxy_source == "https_proxy"


def test_upper_case_when_lower_empty():
    snapshot = read_environment({"http_proxy": "", "HTTP_PROXY": "http://upper:1"})
    assert snapshot.http_proxy == "http://upper:1"
    assert snapshot.http_proxy_source == "HTTP_PROXY"


def test_empty_environment():
    snapshot = read_environment({})
    assert snapshot.http_proxy is None
    assert snapshot.https_proxy is None
    assert snapshot.no_proxy is None
    assert snapshot.deployment_mode is DeploymentMode.EMBEDDED
    assert snapshot.ssl_verify is True


def test_no_proxy_pair():
    assert read_environment({"NO_PROXY": "localhost,.internal"}).no_proxy == "localhost,.internal"


@pytest.mark.parametrize("value", ["1", "true", "standalone", "0", "false", "off"])
def test_standalone_values(value):
    assert get_deployment_mode({"IS_STANDALONE": value}) is DeploymentMode.STANDALONE
    assert is_standalone({"IS_STANDALONE": value}) is True


@pytest.mark.parametrize("value", ["", "   "])
def test_embedded_values(value):
    assert get_deployment_mode({"IS_STANDALONE": value}) is DeploymentMode.EMBEDDED


def test_unset_flag_is_embedded():
    assert get_deployment_mode({}) is DeploymentMode.EMBEDDED
    assert is_standalone({}) is False


def test_ssl_settings():
    snapshot = read_environment({"SSL_CERT_VERIFY": "0", "SSL_CERT_FILE": "/etc/ssl/extra.pem"})
    assert snapshot.ssl_verify is False
    assert snapshot.ca_bundle == "/etc/ssl/extra.pem"

    assert read_environment({"NODE_TLS_REJECT_UNAUTHORIZED": "0"}).ssl_verify is False


def test_reads_os_environ(monkeypatch):
    monkeypatch.setenv("HTTPS_PROXY", "socks5://proxy.local:1080")
    monkeypatch.delenv("https_proxy", raising=False)
    monkeypatch.setenv("IS_STANDALONE", "1")
    snapshot = EnvSnapshot.from_environ()
    assert snapshot.https_proxy == "socks5://proxy.local:1080"
    assert snapshot.deployment_mode is DeploymentMode.STANDALONE


def test_load_env_file(tmp_path, monkeypatch):
    monkeypatch.delenv("PROXY_TEST_ONLY_VAR", raising=False)
    monkeypatch.setenv("PROXY_TEST_KEEP_VAR", "existing")
    env_file = tmp_path / ".env"
    env_file.write_text("PROXY_TEST_ONLY_VAR=from-file\nPROXY_TEST_KEEP_VAR=from-file\n")

    assert load_env_file(str(env_file)) is True

    assert os.environ["PROXY_TEST_ONLY_VAR"] == "from-file"
    assert os.environ["PROXY_TEST_KEEP_VAR"] == "existing"
    os.environ.pop("PROXY_TEST_ONLY_VAR", None)


def test_load_env_file_missing(tmp_path):
    assert load_env_file(str(tmp_path / "missing.env")) is False
