"""
Dispatch Desk - Delivery Order Admin for Flask
==============================================

An admin dashboard module for delivery orders:
- Order listing, search, status filter and summary stats
- Order editing, status changes and deletion
- Rider assignment and reassignment

Usage:
    from flask import Flask
    from dispatchdesk import DispatchDesk

    app = Flask(__name__)
    DispatchDesk(app)   # registers /admin/orders-manager
"""

import os
import logging

from .core.config import Config
from .core.database import SQLiteDocumentStore

__version__ = '0.1.0'
__author__ = 'Laurence Stephan'

logger = logging.getLogger(__name__)


class DispatchDesk:
    """
    Flask extension that wires the orders admin module into an app.

    Args:
        app: Flask application (optional, for the init_app pattern)
        config (dict): optional overrides; ``store`` swaps the document store
            and ``cors_origins`` enables CORS on the orders API
    """

    def __init__(self, app=None, config=None):
        self._config = dict(config or {})
        self.store = self._config.get('store')
        self._registered = []
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self._apply_defaults(app)
        self._setup_database_dir(app)

        if self.store is None:
            self.store = SQLiteDocumentStore(app.config['ORDERS_DB'])

        from .modules.orders import orders_bp
        app.register_blueprint(orders_bp)
        self._registered.append('orders')

        self._setup_cors(app)

        app.extensions['dispatchdesk'] = self
        logger.info("Dispatch Desk registered modules: %s", ', '.join(self._registered))

    def _apply_defaults(self, app):
        """Fill app.config from Config for anything the host app didn't set"""
        db_dir = app.config.get('DB_DIR') or Config.DB_DIR
        app.config.setdefault('DB_DIR', db_dir)
        app.config.setdefault('ORDERS_DB', os.path.join(db_dir, 'orders.db'))
        app.config.setdefault('ANALYTICS_DB', os.path.join(db_dir, 'analytics_log.db'))
        app.config.setdefault('ORDERS_COLLECTION', Config.ORDERS_COLLECTION)
        app.config.setdefault('USERS_COLLECTION', Config.USERS_COLLECTION)
        app.config.setdefault('ADMIN_LOGIN_URL', Config.ADMIN_LOGIN_URL)
        if not app.config.get('SECRET_KEY') and Config.SECRET_KEY:
            app.config['SECRET_KEY'] = Config.SECRET_KEY

    def _setup_database_dir(self, app):
        db_dir = app.config['DB_DIR']
        if db_dir and not os.path.isdir(db_dir):
            os.makedirs(db_dir, exist_ok=True)

    def _setup_cors(self, app):
        origins = self._config.get('cors_origins') or app.config.get('CORS_ORIGINS') or Config.CORS_ORIGINS
        if not origins:
            return
        if isinstance(origins, str):
            origins = [o.strip() for o in origins.split(',') if o.strip()]

        from flask_cors import CORS
        CORS(app, resources={r"/admin/orders-manager/api/*": {"origins": origins}},
             supports_credentials=True)

    def get_registered_modules(self):
        return list(self._registered)


__all__ = ['DispatchDesk']
