"""
Orders Admin Routes
===================

Page and JSON API for the order management dashboard. Every request builds
a fresh OrderDesk over the configured document store.
"""

import logging
from functools import wraps

from flask import render_template, request, redirect, session, jsonify, current_app
from . import orders_bp
from .desk import OrderDesk
from .views import STATUSES, ALL_STATUSES, PACKAGE_TYPES, find_order
from dispatchdesk.core.config import get_config_value
from dispatchdesk.core.database import SQLiteDocumentStore
from dispatchdesk.core.errors import MutationError, ValidationError, ConfirmationRequired

logger = logging.getLogger(__name__)


def _get_store():
    """Store registered by the DispatchDesk extension, else the default SQLite store"""
    ext = current_app.extensions.get('dispatchdesk')
    if ext is not None and ext.store is not None:
        return ext.store
    return SQLiteDocumentStore()


def _get_desk(with_riders=False):
    desk = OrderDesk(
        _get_store(),
        orders_collection=get_config_value('ORDERS_COLLECTION', 'orders'),
        users_collection=get_config_value('USERS_COLLECTION', 'users'),
    )
    desk.load_orders()
    if with_riders:
        desk.load_eligible_riders()
    return desk


def admin_required(f):
    """Redirect page requests to login when there is no admin session"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'admin_id' not in session:
            login_url = get_config_value('ADMIN_LOGIN_URL', '/admin/login')
            return redirect(f"{login_url}?next={request.path}")
        return f(*args, **kwargs)
    return decorated_function


def api_admin_required(f):
    """JSON 401 for API requests without an admin session"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'admin_id' not in session:
            return jsonify({'success': False, 'error': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated_function


def _error(message, status_code):
    return jsonify({'success': False, 'error': message}), status_code


def _order_id_from(data):
    order_id = data.get('order_id')
    if not order_id:
        return None
    return str(order_id)


@orders_bp.route('/')
@admin_required
def orders_manager():
    """Order management page"""
    desk = _get_desk(with_riders=True)
    desk.set_search(request.args.get('search', ''))
    desk.set_status_filter(request.args.get('status', ALL_STATUSES))

    return render_template(
        'orders/orders_manager.html',
        rows=desk.rows(),
        stats=desk.stats(),
        pending=desk.pending(),
        riders=[r.to_dict() for r in desk.riders],
        error=desk.error,
        search=desk.search,
        status_filter=desk.status_filter,
        statuses=STATUSES,
        all_statuses=ALL_STATUSES,
    )


@orders_bp.route('/api/orders')
@api_admin_required
def api_orders():
    """Filtered order rows plus pending subset and stats"""
    desk = _get_desk()
    desk.set_search(request.args.get('search', ''))
    desk.set_status_filter(request.args.get('status', ALL_STATUSES))
    try:
        desk.set_scope(
            customer=request.args.get('customer'),
            rider=request.args.get('rider'),
            date_from=request.args.get('from'),
            date_to=request.args.get('to'),
        )
    except ValidationError as e:
        return _error(str(e), 400)

    return jsonify({
        'success': desk.error is None,
        'error': desk.error,
        'orders': desk.rows(),
        'pending': [o.get('id') for o in desk.pending()],
        'stats': desk.stats(),
        'statuses': STATUSES,
        'package_types': PACKAGE_TYPES,
    })


@orders_bp.route('/api/order/<order_id>')
@api_admin_required
def api_order_details(order_id):
    """Full order document"""
    desk = _get_desk()
    if desk.error:
        return _error(desk.error, 500)

    order = find_order(desk.orders, order_id)
    if not order:
        return _error('Order not found', 404)

    return jsonify({'success': True, 'order': order})


@orders_bp.route('/api/riders')
@api_admin_required
def api_riders():
    """Riders eligible for assignment"""
    desk = OrderDesk(_get_store(), users_collection=get_config_value('USERS_COLLECTION', 'users'))
    desk.load_eligible_riders()
    return jsonify({'success': True, 'riders': [r.to_dict() for r in desk.riders]})


@orders_bp.route('/api/update-order', methods=['POST'])
@api_admin_required
def api_update_order():
    """Save an edited order"""
    data = request.get_json(silent=True) or {}
    order_id = _order_id_from(data)
    if not order_id:
        return _error('Order ID required', 400)

    fields = data.get('fields')
    if fields is None:
        fields = {k: v for k, v in data.items() if k != 'order_id'}
    if not isinstance(fields, dict):
        return _error('fields must be an object', 400)

    desk = _get_desk()
    if desk.error:
        return _error(desk.error, 500)
    try:
        desk.open_edit(order_id)
        desk.update_edit(fields)
        order = desk.save_edit()
    except ValidationError:
        return _error('Order not found', 404)
    except MutationError as e:
        return _error(str(e), 500)

    return jsonify({
        'success': True,
        'message': f'Order {order_id} updated successfully',
        'order': order
    })


@orders_bp.route('/api/change-status', methods=['POST'])
@api_admin_required
def api_change_status():
    """Set a new status on one order"""
    data = request.get_json(silent=True) or {}
    order_id = _order_id_from(data)
    if not order_id:
        return _error('Order ID required', 400)
    if not data.get('status'):
        return _error('Status required', 400)

    desk = _get_desk()
    if desk.error:
        return _error(desk.error, 500)
    try:
        desk.open_status(order_id)
        desk.select_status(data['status'])
        order = desk.save_status()
    except ValidationError:
        return _error('Order not found', 404)
    except MutationError as e:
        return _error(str(e), 500)

    return jsonify({
        'success': True,
        'message': f'Order {order_id} status set to {data["status"]}',
        'order': order
    })


@orders_bp.route('/api/assign-rider', methods=['POST'])
@api_admin_required
def api_assign_rider():
    """Assign or reassign a rider"""
    data = request.get_json(silent=True) or {}
    order_id = _order_id_from(data)
    if not order_id:
        return _error('Order ID required', 400)

    desk = _get_desk(with_riders=True)
    if desk.error:
        return _error(desk.error, 500)

    try:
        desk.open_assign(order_id)
    except ValidationError:
        return _error('Order not found', 404)

    label = desk.assign_label
    desk.select_rider(data.get('rider_id'))
    try:
        order = desk.save_assign()
    except ValidationError as e:
        return _error(str(e), 400)
    except MutationError as e:
        return _error(str(e), 500)

    return jsonify({
        'success': True,
        'message': f'{label}: order {order_id}',
        'order': order
    })


@orders_bp.route('/api/delete-order', methods=['POST'])
@api_admin_required
def api_delete_order():
    """Delete an order; requires an explicit confirm flag"""
    data = request.get_json(silent=True) or {}
    order_id = _order_id_from(data)
    if not order_id:
        return _error('Order ID required', 400)

    desk = _get_desk()
    if desk.error:
        return _error(desk.error, 500)
    if not find_order(desk.orders, order_id):
        return _error('Order not found', 404)

    try:
        desk.delete_order(order_id, confirmed=data.get('confirm') is True)
    except ConfirmationRequired as e:
        return _error(str(e), 400)
    except MutationError as e:
        return _error(str(e), 500)

    return jsonify({
        'success': True,
        'message': f'Order {order_id} deleted successfully'
    })
