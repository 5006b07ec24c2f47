"""Tests for configuration loading, validation and logging setup."""
import logging
import logging.handlers

import pytest
import yaml
from unittest.mock import patch

from shared.constants import CONFIG_PATH
from shared.exceptions import ConfigError
from utils import load_config, setup_logging, validate_config


class TestLoadConfig:

    def test_load_config_success(self, tmp_path):
        """load_config should return a dict from a valid YAML file."""
        cfg = {
            'payoff': {'points': 100},
            'backtest': {'frequency': 'WEEKLY'},
        }
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(yaml.dump(cfg))

        with patch('dotenv.load_dotenv'):
            result = load_config(str(cfg_file))

        assert result['payoff']['points'] == 100
        assert result['backtest']['frequency'] == 'WEEKLY'

    def test_load_config_missing_file(self):
        """load_config should raise FileNotFoundError for a missing path."""
        with patch('dotenv.load_dotenv'):
            with pytest.raises(FileNotFoundError):
                load_config('/nonexistent/path/config.yaml')

    def test_env_var_substitution(self, tmp_path, monkeypatch):
        monkeypatch.setenv('PAYOFF_LOG_FILE', '/tmp/from_env.log')
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(yaml.dump({'logging': {'file': '${PAYOFF_LOG_FILE}'}}))

        with patch('dotenv.load_dotenv'):
            result = load_config(str(cfg_file))

        assert result['logging']['file'] == '/tmp/from_env.log'

    def test_unknown_env_var_left_as_is(self, tmp_path):
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(yaml.dump({'logging': {'file': '${NO_SUCH_PAYOFF_VAR}'}}))

        with patch('dotenv.load_dotenv'):
            result = load_config(str(cfg_file))

        assert result['logging']['file'] == '${NO_SUCH_PAYOFF_VAR}'

    def test_empty_file(self, tmp_path):
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text("")
        with patch('dotenv.load_dotenv'):
            assert load_config(str(cfg_file)) == {}

    def test_repository_config_is_valid(self):
        with patch('dotenv.load_dotenv'):
            config = load_config(CONFIG_PATH)
        validate_config(config)


class TestValidateConfig:

    def test_validate_config_valid(self, sample_config):
        """A complete, well-formed config should pass validation (no exception)."""
        validate_config(sample_config)  # Should not raise

    def test_validate_config_missing_section(self, sample_config):
        del sample_config['backtest']
        with pytest.raises(ValueError, match="backtest"):
            validate_config(sample_config)

    def test_config_error_is_value_error(self, sample_config):
        del sample_config['payoff']
        with pytest.raises(ConfigError):
            validate_config(sample_config)

    def test_bad_frequency(self, sample_config):
        sample_config['backtest']['frequency'] = 'DAILY'
        with pytest.raises(ValueError, match="frequency"):
            validate_config(sample_config)

    def test_lowercase_frequency_accepted(self, sample_config):
        sample_config['backtest']['frequency'] = 'weekly'
        validate_config(sample_config)

    @pytest.mark.parametrize("points", [0, -1, 2.5])
    def test_bad_points(self, sample_config, points):
        sample_config['payoff']['points'] = points
        with pytest.raises(ValueError, match="points"):
            validate_config(sample_config)

    @pytest.mark.parametrize("range_pct", [0, 1, 1.5, -0.2])
    def test_bad_range(self, sample_config, range_pct):
        sample_config['payoff']['range_pct'] = range_pct
        with pytest.raises(ValueError, match="range_pct"):
            validate_config(sample_config)

    def test_negative_withdrawal(self, sample_config):
        sample_config['backtest']['monthly_withdrawal'] = -10
        with pytest.raises(ValueError, match="monthly_withdrawal"):
            validate_config(sample_config)

    def test_non_positive_base_capital(self, sample_config):
        sample_config['backtest']['base_capital'] = 0
        with pytest.raises(ValueError, match="base_capital"):
            validate_config(sample_config)

    def test_bad_log_level(self, sample_config):
        sample_config['logging']['level'] = 'LOUD'
        with pytest.raises(ValueError, match="level"):
            validate_config(sample_config)


class TestSetupLogging:

    def setup_method(self):
        root = logging.getLogger()
        self._handlers = list(root.handlers)
        self._level = root.level

    def teardown_method(self):
        root = logging.getLogger()
        for handler in list(root.handlers):
            if handler not in self._handlers:
                handler.close()
                root.removeHandler(handler)
        for handler in self._handlers:
            if handler not in root.handlers:
                root.addHandler(handler)
        root.setLevel(self._level)

    def test_file_handler_created(self, tmp_path):
        log_file = tmp_path / "logs" / "engine.log"
        setup_logging({'logging': {'level': 'DEBUG', 'file': str(log_file), 'console': False}})

        logging.getLogger('backtest').debug("hello")
        assert log_file.exists()
        assert logging.getLogger().level == logging.DEBUG

    def test_console_only(self):
        setup_logging({'logging': {'level': 'WARNING', 'console': True}})
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert not any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)
