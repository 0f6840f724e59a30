import pytest
from flask import Flask

from voucher_desk.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    config as config_classes,
    get_config,
    init_config,
    validate_config,
)


def test_get_config_by_name():
    assert get_config('testing') is TestingConfig
    assert get_config('production') is ProductionConfig


def test_get_config_reads_flask_env(monkeypatch):
    monkeypatch.setenv('FLASK_ENV', 'testing')

    assert get_config() is TestingConfig


def test_get_config_unknown_name_falls_back_to_development(monkeypatch):
    monkeypatch.delenv('FLASK_ENV', raising=False)

    assert get_config('staging') is DevelopmentConfig
    assert get_config() is DevelopmentConfig


def test_init_config_applies_class():
    app = Flask(__name__)

    assert init_config(app, 'testing') is TestingConfig
    assert app.config['TESTING'] is True
    assert app.config['SEARCH_DEBOUNCE_MS'] == 0


def test_validate_config_reports_bad_settings():
    class BrokenConfig(TestingConfig):
        SEARCH_DEBOUNCE_MS = -1
        SEARCH_SUGGESTION_LIMIT = 0
        LOG_API_URL = 'ftp://logs.example.org'

    errors = validate_config(BrokenConfig)

    assert len(errors) == 3
    assert validate_config(TestingConfig) == []


def test_init_config_rejects_invalid_class(monkeypatch):
    class BrokenConfig(TestingConfig):
        SEARCH_SUGGESTION_LIMIT = 0

    monkeypatch.setitem(config_classes, 'broken', BrokenConfig)

    with pytest.raises(RuntimeError):
        init_config(Flask(__name__), 'broken')
