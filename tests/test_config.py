from datetime import timedelta

import pytest

from sentinel.config import Config, parse_duration
from sentinel.models import InvalidConfigError


@pytest.mark.parametrize('value, expected', [
    ('90', timedelta(seconds=90)),
    ('90s', timedelta(seconds=90)),
    ('5m', timedelta(minutes=5)),
    ('1h', timedelta(hours=1)),
    ('1.5m', timedelta(seconds=90)),
    (' 30S ', timedelta(seconds=30)),
])
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


@pytest.mark.parametrize('value', ['', 'soon', '5 minutes', '-5s', '1d'])
def test_parse_duration_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_duration(value)


def test_defaults_without_env_file(clean_env, tmp_path):
    config = Config(env_file=tmp_path / 'missing.env')

    assert config.timeout == timedelta(minutes=30)
    assert config.warning_threshold is None
    assert config.activity_spacing == timedelta(seconds=1)
    assert config.tracking_enabled
    assert config.log_level == 'WARNING'
    assert config.log_path is None


def test_values_loaded_from_env_file(clean_env, tmp_path):
    env_file = tmp_path / '.env'
    env_file.write_text(
        "SENTINEL_TIMEOUT=15m\n"
        "SENTINEL_WARNING=1m\n"
        "SENTINEL_ACTIVITY_SPACING=2s\n"
        "SENTINEL_TRACKING_ENABLED=no\n"
        "SENTINEL_LOG_LEVEL=debug\n"
        f"SENTINEL_LOG_PATH={tmp_path / 'logs' / 'sentinel.log'}\n"
    )

    config = Config(env_file=env_file)

    assert config.timeout == timedelta(minutes=15)
    assert config.warning_threshold == timedelta(minutes=1)
    assert config.activity_spacing == timedelta(seconds=2)
    assert not config.tracking_enabled
    assert config.log_level == 'DEBUG'
    assert config.log_path == tmp_path / 'logs' / 'sentinel.log'

    policy = config.inactivity_config()
    assert policy.warning_starts_after == 14 * 60


def test_environment_wins_over_env_file(clean_env, tmp_path):
    env_file = tmp_path / '.env'
    env_file.write_text("SENTINEL_TIMEOUT=15m\n")
    clean_env.setenv('SENTINEL_TIMEOUT', '45s')

    assert Config(env_file=env_file).timeout == timedelta(seconds=45)


def test_invalid_duration_in_environment(clean_env, tmp_path):
    clean_env.setenv('SENTINEL_TIMEOUT', 'soon')

    with pytest.raises(ValueError):
        Config(env_file=tmp_path / 'missing.env')


def test_inconsistent_policy_is_reported(clean_env, tmp_path):
    clean_env.setenv('SENTINEL_TIMEOUT', '5m')
    clean_env.setenv('SENTINEL_WARNING', '10m')

    config = Config(env_file=tmp_path / 'missing.env')

    with pytest.raises(InvalidConfigError):
        config.inactivity_config()
