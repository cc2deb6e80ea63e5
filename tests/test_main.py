import json
import yaml
import pytest
import requests
from unittest.mock import patch
from pool_deriver import main
from pool_deriver.core.errors import EmptyPoolListError


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "api:\n"
        "  host: 127.0.0.1\n"
        "  port: 9000\n"
        "haproxy:\n"
        "  pools: [web]\n"
        "logging:\n"
        "  level: WARNING\n"
    )
    return str(path)


@pytest.fixture(autouse=True)
def isolate(monkeypatch):
    """Keep config and root logging handlers from leaking between tests"""
    monkeypatch.setattr('pool_deriver.utils.config.CONFIG', {})
    monkeypatch.setattr(main, 'setup_logging', lambda config: None)


ATTRIBUTES = {"frontend": {"all_requests": {"default_backend": "web"}}, "backend": {"web": {"server": []}}}


def test_missing_config_file(tmp_path, capsys):
    """Test that a missing config file exits with an error"""
    assert main.main(['--config', str(tmp_path / 'nope.yaml'), 'derive']) == 1
    assert "Configuration file not found" in capsys.readouterr().err


def test_derive_prints_json(config_file, capsys):
    """Test that derive prints the attributes as JSON"""
    with patch('pool_deriver.main.connect_to_mongo'), \
         patch('pool_deriver.main.close_mongo_connection') as mock_close, \
         patch('pool_deriver.main.ConfigurationRun') as mock_run:
        mock_run.return_value.execute.return_value = ATTRIBUTES

        assert main.main(['--config', config_file, 'derive']) == 0

        assert json.loads(capsys.readouterr().out) == ATTRIBUTES
        mock_close.assert_called_once()


def test_derive_writes_yaml(config_file, tmp_path):
    """Test that derive can write YAML to a file"""
    output = tmp_path / "haproxy.yaml"
    with patch('pool_deriver.main.connect_to_mongo'), \
         patch('pool_deriver.main.close_mongo_connection'), \
         patch('pool_deriver.main.ConfigurationRun') as mock_run:
        mock_run.return_value.execute.return_value = ATTRIBUTES

        assert main.main(['--config', config_file, 'derive', '--format', 'yaml', '--output', str(output)]) == 0

    assert yaml.safe_load(output.read_text()) == ATTRIBUTES


def test_derive_failure(config_file, capsys):
    """Test that derivation errors exit non-zero"""
    with patch('pool_deriver.main.connect_to_mongo'), \
         patch('pool_deriver.main.close_mongo_connection'), \
         patch('pool_deriver.main.ConfigurationRun') as mock_run:
        mock_run.return_value.execute.side_effect = EmptyPoolListError()

        assert main.main(['--config', config_file, 'derive']) == 1
        assert "No load balancer pools configured" in capsys.readouterr().err


def test_attach_uses_configured_api(config_file):
    """Test that attach targets the API from config"""
    with patch('pool_deriver.main.DeriverClient') as mock_client:
        assert main.main(['--config', config_file, 'attach', '--pool', 'web', '--uuid', 'u1',
                          '--ip', '10.0.0.1', '--port', '80', '--vhost-path', '/app']) == 0

        mock_client.assert_called_once_with("http://127.0.0.1:9000", timeout=10)
        mock_client.return_value.attach.assert_called_once_with('web', 'u1', '10.0.0.1', 80, '/app')


def test_detach_failure(config_file):
    """Test that an unreachable API makes detach exit non-zero"""
    with patch('pool_deriver.main.DeriverClient') as mock_client:
        mock_client.return_value.detach.side_effect = requests.ConnectionError("refused")

        assert main.main(['--config', config_file, 'detach', '--url', 'http://lb:1',
                          '--pool', 'web', '--uuid', 'u1']) == 1
        mock_client.assert_called_once_with("http://lb:1", timeout=10)
