"""
Centralized logging service for Dispatch Desk.
Persists structured log rows to SQLite alongside the console logger.
"""

import os
import json
import logging
import traceback
from datetime import datetime
from flask import request, has_request_context, session
from .database import Database
from .config import get_config_value

console = logging.getLogger('dispatchdesk')


class LoggingService:
    """Centralized logging service for application-wide logging"""

    @staticmethod
    def _db_path():
        return get_config_value('ANALYTICS_DB', 'analytics_log.db')

    @staticmethod
    def _ensure_logs_table():
        """Ensure the app_logs table exists"""
        path = LoggingService._db_path()
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with Database.connect(path) as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS app_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL,
                    level TEXT NOT NULL,
                    source TEXT NOT NULL,
                    message TEXT NOT NULL,
                    details TEXT,
                    ip_address TEXT,
                    request_path TEXT,
                    user_id TEXT
                )
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_logs_timestamp
                ON app_logs(timestamp DESC)
            """)
            conn.commit()

    @staticmethod
    def _get_request_context():
        """Extract ip, path and admin id from the active request, if any"""
        if not has_request_context():
            return None, None, None

        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        if ip_address and ',' in ip_address:
            ip_address = ip_address.split(',')[0].strip()

        admin_id = session.get('admin_id')
        return ip_address, request.path, str(admin_id) if admin_id is not None else None

    @staticmethod
    def log(level, source, message, details=None, user_id=None):
        """
        Log a message to the console and the database

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (orders, riders, store, etc.)
            message (str): Main log message
            details (str/dict): Additional details (will be JSON-encoded if dict)
            user_id (str): Optional user identifier, defaults to the session admin
        """
        level = level.upper()
        console.log(getattr(logging, level, logging.INFO), "[%s] %s", source, message)

        if isinstance(details, dict):
            details = json.dumps(details, indent=2, default=str)

        try:
            LoggingService._ensure_logs_table()
            ip_address, request_path, admin_id = LoggingService._get_request_context()

            with Database.connect(LoggingService._db_path()) as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT INTO app_logs
                    (timestamp, level, source, message, details, ip_address, request_path, user_id)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    datetime.now().isoformat(), level, source, message, details,
                    ip_address, request_path, user_id or admin_id
                ))
                conn.commit()

        except Exception as e:
            # Fallback to console logging if database fails
            console.warning("Logging service error: %s", e)
            if details:
                console.warning("Details: %s", details)

    @staticmethod
    def debug(source, message, details=None, user_id=None):
        LoggingService.log('DEBUG', source, message, details, user_id)

    @staticmethod
    def info(source, message, details=None, user_id=None):
        LoggingService.log('INFO', source, message, details, user_id)

    @staticmethod
    def warning(source, message, details=None, user_id=None):
        LoggingService.log('WARNING', source, message, details, user_id)

    @staticmethod
    def error(source, message, details=None, user_id=None):
        LoggingService.log('ERROR', source, message, details, user_id)

    @staticmethod
    def log_user_action(source, action, user_id=None, details=None):
        """Log admin actions (edit, delete, assign, etc.)"""
        LoggingService.info(source, f"User action: {action}", details, user_id)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    @staticmethod
    def recent_logs(source=None, limit=50):
        """Most recent log rows, newest first"""
        LoggingService._ensure_logs_table()
        with Database.connect(LoggingService._db_path()) as conn:
            cursor = conn.cursor()
            if source:
                cursor.execute("""
                    SELECT timestamp, level, source, message, details
                    FROM app_logs WHERE source = ?
                    ORDER BY id DESC LIMIT ?
                """, (source, limit))
            else:
                cursor.execute("""
                    SELECT timestamp, level, source, message, details
                    FROM app_logs ORDER BY id DESC LIMIT ?
                """, (limit,))
            columns = ['timestamp', 'level', 'source', 'message', 'details']
            return [dict(zip(columns, row)) for row in cursor.fetchall()]


def db_log(level, source, message, details=None):
    """Shortcut used by modules to persist a log row"""
    LoggingService.log(level, source, message, details)

