import os
from dotenv import load_dotenv

load_dotenv(override=True)

class Config:
    """
    Base configuration for Dispatch Desk.
    Projects should provide database paths via environment variables.
    """
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    # Document store holding the orders and users collections
    ORDERS_DB = os.getenv('ORDERS_DB', os.path.join(DB_DIR, "orders.db"))
    ANALYTICS_DB = os.getenv('ANALYTICS_DB', os.path.join(DB_DIR, "analytics_log.db"))

    # Collection names
    ORDERS_COLLECTION = os.getenv('ORDERS_COLLECTION', "orders")
    USERS_COLLECTION = os.getenv('USERS_COLLECTION', "users")

    # Where unauthenticated admins get sent
    ADMIN_LOGIN_URL = os.getenv('ADMIN_LOGIN_URL', '/admin/login')

    # Comma separated origins allowed to call the orders API (empty disables CORS)
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '')


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then Config, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val:
        return val
    return os.getenv(key, default)
