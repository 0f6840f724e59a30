# Student Voucher Desk Configuration

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Base directory
BASE_DIR = Path(__file__).parent.parent.absolute()


def _env_flag(name, default='False'):
    return os.environ.get(name, default).lower() in ['true', 'on', '1']


class Config:
    """Base configuration class"""

    # Flask Configuration
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'voucher-desk-secret-key-2026'

    # Roster Configuration
    ROSTER_PATH = Path(os.environ.get('ROSTER_PATH') or BASE_DIR / 'data' / 'students.xlsx')
    ROSTER_SHEET = 0  # First sheet of the workbook
    ROSTER_ID_COLUMN = 'StudentId'
    ROSTER_NAME_COLUMN = 'Student Name'
    ROSTER_SERIAL_COLUMN = 'SNo'
    ROSTER_LOAD_ON_STARTUP = True

    # Search Configuration
    SEARCH_DEBOUNCE_MS = 300
    SEARCH_SUGGESTION_LIMIT = 5
    SEARCH_CALL_TIMEOUT = 5  # seconds

    # Log API Configuration
    LOG_API_URL = os.environ.get('LOG_API_URL')
    LOG_API_KEY = os.environ.get('LOG_API_KEY')
    LOG_API_TIMEOUT = int(os.environ.get('LOG_API_TIMEOUT') or 10)  # seconds
    LOG_QUEUE_SIZE = 1000
    LOG_RECENT_LIMIT = 20

    # Voucher Configuration
    VOUCHER_EVENT_NAME = os.environ.get('VOUCHER_EVENT_NAME') or 'Bano Qabil 3.0'
    VOUCHER_CEREMONY_NAME = os.environ.get('VOUCHER_CEREMONY_NAME') or 'Graduation Ceremony'
    VOUCHER_INCLUDE_QR = _env_flag('VOUCHER_INCLUDE_QR', 'True')

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'
    LOG_FILE = BASE_DIR / 'logs' / 'voucher_desk.log'
    LOG_MAX_BYTES = 10 * 1024 * 1024  # 10MB
    LOG_BACKUP_COUNT = 5

    # Development Configuration
    DEBUG = _env_flag('DEBUG')
    TESTING = False

    @classmethod
    def init_app(cls, app):
        """Initialize application configuration"""
        app.config.from_object(cls)
        app.logger.setLevel(cls.LOG_LEVEL)


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False

    # More verbose logging
    LOG_LEVEL = 'DEBUG'


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    DEBUG = True

    # Tests inject their own roster and log client
    ROSTER_LOAD_ON_STARTUP = False
    LOG_API_URL = None

    # No quiet period so tests do not sleep
    SEARCH_DEBOUNCE_MS = 0
    VOUCHER_INCLUDE_QR = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    # Production logging
    LOG_LEVEL = 'WARNING'

    @classmethod
    def init_app(cls, app):
        super().init_app(app)

        # Setup file logging
        if not app.debug:
            cls.LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                cls.LOG_FILE,
                maxBytes=cls.LOG_MAX_BYTES,
                backupCount=cls.LOG_BACKUP_COUNT
            )
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
            ))
            file_handler.setLevel(logging.INFO)
            app.logger.addHandler(file_handler)

            app.logger.setLevel(logging.INFO)
            app.logger.info('Voucher desk startup')


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


# Environment-specific configurations
def get_config(config_name=None):
    """Get configuration class by name, falling back to the FLASK_ENV environment variable"""
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'default')
    return config.get(config_name, DevelopmentConfig)


class QRCodeConfig:
    """QR code settings for the voucher token"""

    VERSION = 1  # Grows automatically with the payload
    ERROR_CORRECT = 'M'  # ~15% error correction
    BOX_SIZE = 10
    BORDER = 4

    FILL_COLOR = "black"
    BACK_COLOR = "white"

    @classmethod
    def as_settings(cls):
        return {
            'version': cls.VERSION,
            'error_correction': cls.ERROR_CORRECT,
            'box_size': cls.BOX_SIZE,
            'border': cls.BORDER,
            'fill_color': cls.FILL_COLOR,
            'back_color': cls.BACK_COLOR
        }


def validate_config(config_class):
    """Validate configuration settings"""
    errors = []

    if config_class.SEARCH_DEBOUNCE_MS < 0:
        errors.append(f"SEARCH_DEBOUNCE_MS must not be negative: {config_class.SEARCH_DEBOUNCE_MS}")

    if config_class.SEARCH_SUGGESTION_LIMIT < 1:
        errors.append(f"SEARCH_SUGGESTION_LIMIT must be at least 1: {config_class.SEARCH_SUGGESTION_LIMIT}")

    if config_class.LOG_API_URL and not config_class.LOG_API_URL.startswith(('http://', 'https://')):
        errors.append(f"LOG_API_URL must be an http(s) URL: {config_class.LOG_API_URL}")

    return errors


def init_config(app, config_name=None):
    """Initialize application with configuration"""
    config_class = get_config(config_name)
    config_class.init_app(app)

    # Validate configuration
    errors = validate_config(config_class)
    if errors:
        for error in errors:
            app.logger.error(f"Configuration error: {error}")
        raise RuntimeError("Configuration validation failed")

    return config_class
