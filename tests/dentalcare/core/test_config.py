import pytest

from dentalcare.core import config


def test_get_bool_reads_common_truthy_values() -> None:
    assert config._get_bool(' Yes ') is True
    assert config._get_bool('0', default=True) is False
    assert config._get_bool(None, default=True) is True


def test_get_list_splits_and_trims() -> None:
    assert config._get_list('http://a.test, ,http://b.test ', []) == ['http://a.test', 'http://b.test']
    assert config._get_list('', ['fallback']) == ['fallback']


def test_production_requires_real_jwt_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'APP_ENV', 'production')
    monkeypatch.setattr(config, 'JWT_SECRET_KEY', 'change-me')

    with pytest.raises(RuntimeError, match='JWT_SECRET_KEY'):
        config.validate_runtime_config()


def test_default_duration_must_be_positive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'DEFAULT_APPOINTMENT_DURATION_MINUTES', 0)

    with pytest.raises(RuntimeError, match='DEFAULT_APPOINTMENT_DURATION_MINUTES'):
        config.validate_runtime_config()
