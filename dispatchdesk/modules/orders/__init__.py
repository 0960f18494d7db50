"""
Orders Admin Module
===================

Admin interface for delivery order management.

Provides:
- Order listing with search, status filter and summary stats
- Order detail view and editing
- Order status changes
- Rider assignment and reassignment
"""

from flask import Blueprint

orders_bp = Blueprint(
    'orders_admin',
    __name__,
    url_prefix='/admin/orders-manager',
    template_folder='templates'
)

from . import routes

__all__ = ['orders_bp']
