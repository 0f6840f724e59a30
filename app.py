"""
Student Voucher Desk - Main Application
Author: Voucher Desk Team
Date: October 2026

This module serves as the main entry point for the voucher desk. It configures
logging, builds the Flask application and runs the development server.

Features:
- Student lookup by ID or name
- Printable thermal vouchers (download or print)
- Attendance marking against the remote log service
"""

import logging
import os

from voucher_desk import create_app, shutdown_app

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
)
logger = logging.getLogger(__name__)

app = create_app(os.environ.get('FLASK_ENV'))

if __name__ == '__main__':
    try:
        # Run the application
        app.run(debug=app.config['DEBUG'], host='0.0.0.0', port=int(os.environ.get('PORT', 5000)),
                use_reloader=False)
    finally:
        shutdown_app(app)
        logger.info("Voucher desk stopped")
