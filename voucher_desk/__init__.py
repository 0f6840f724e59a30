# Student Voucher Desk - App Package
"""
Main application package for the Student Voucher Desk.
This package contains the Flask application factory and all its modules.
"""

import logging

from flask import Flask

from .config import QRCodeConfig, init_config
from .modules.log_client import LogClient
from .modules.qr_generator import QRGenerator
from .modules.roster_source import RosterSource
from .modules.search_desk import SearchDesk
from .modules.voucher_renderer import VoucherRenderer

__version__ = "1.0.0"
__author__ = "Voucher Desk Team"
__description__ = "Student lookup desk that prints identity vouchers and logs attendance"

__all__ = [
    'create_app',
    'LogClient',
    'QRGenerator',
    'RosterSource',
    'SearchDesk',
    'VoucherRenderer'
]

logger = logging.getLogger(__name__)


def create_app(config_name=None, config_overrides=None, roster_source=None, log_client=None):
    """
    Build the Flask application and its desk components.

    Args:
        config_name: Key of the configuration class ('development', 'testing', ...)
        config_overrides: Extra settings applied after the configuration class
        roster_source: Pre-built roster source (skips spreadsheet settings)
        log_client: Pre-built log client

    Returns:
        Flask: Configured application
    """
    app = Flask(__name__)
    init_config(app, config_name)
    if config_overrides:
        app.config.update(config_overrides)

    if roster_source is None:
        roster_source = RosterSource(
            app.config['ROSTER_PATH'],
            sheet_name=app.config['ROSTER_SHEET'],
            id_column=app.config['ROSTER_ID_COLUMN'],
            name_column=app.config['ROSTER_NAME_COLUMN'],
            serial_column=app.config['ROSTER_SERIAL_COLUMN']
        )

    search_desk = SearchDesk(
        roster_source.records,
        debounce_seconds=app.config['SEARCH_DEBOUNCE_MS'] / 1000,
        suggestion_limit=app.config['SEARCH_SUGGESTION_LIMIT'],
        call_timeout=app.config['SEARCH_CALL_TIMEOUT']
    )
    roster_source.subscribe(search_desk.set_roster)

    if app.config['ROSTER_LOAD_ON_STARTUP']:
        result = roster_source.load()
        if not result['success']:
            logger.error(f"Starting with an empty roster: {result['error']}")

    if log_client is None:
        log_client = LogClient(
            app.config['LOG_API_URL'],
            api_key=app.config['LOG_API_KEY'],
            timeout=app.config['LOG_API_TIMEOUT'],
            queue_size=app.config['LOG_QUEUE_SIZE']
        )

    voucher_renderer = VoucherRenderer(
        event_name=app.config['VOUCHER_EVENT_NAME'],
        ceremony_name=app.config['VOUCHER_CEREMONY_NAME'],
        include_qr=app.config['VOUCHER_INCLUDE_QR'],
        qr_generator=QRGenerator(QRCodeConfig.as_settings())
    )

    app.extensions['voucher_desk'] = {
        'roster_source': roster_source,
        'search_desk': search_desk,
        'log_client': log_client,
        'voucher_renderer': voucher_renderer
    }

    from .routes import desk_bp
    app.register_blueprint(desk_bp)

    return app


def shutdown_app(app):
    """Stop the background threads owned by the application."""
    components = app.extensions.get('voucher_desk', {})
    if 'search_desk' in components:
        components['search_desk'].shutdown()
    if 'log_client' in components:
        components['log_client'].shutdown()
