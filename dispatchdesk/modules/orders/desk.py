"""
Order Desk
==========

Holds the working state of the order management page: the loaded orders
and riders, the active filters, and whichever edit, status or assign
dialog is open. Every mutation is one request against the document store
followed by a full reload of the orders collection.
"""

import logging
from datetime import datetime, timezone

from dispatchdesk.core.errors import (
    StoreError, MutationError, ValidationError, ConfirmationRequired
)
from dispatchdesk.core.logging_service import LoggingService, db_log
from .riders import eligible_riders, resolve_rider
from .views import (
    ALL_STATUSES, display_row, display_status, filter_orders, find_order,
    pending_orders, order_stats, assigned_rider_id, to_number,
    orders_for_customer, orders_for_rider, orders_in_date_range, parse_timestamp,
)

logger = logging.getLogger(__name__)

LOAD_ORDERS_ERROR = 'Failed to fetch orders'

# Fields coerced to numbers on save; weight is deliberately left as entered
NUMERIC_EDIT_FIELDS = ('price', 'distance')


def utc_timestamp():
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix"""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class OrderDesk:
    """
    In-memory state for one admin session over the orders collection.

    Args:
        store: a DocumentStore (list_all / update / delete)
        orders_collection (str): name of the orders collection
        users_collection (str): name of the users collection riders come from
        clock: callable returning the updatedAt timestamp string
    """

    def __init__(self, store, orders_collection='orders', users_collection='users', clock=None):
        self.store = store
        self.orders_collection = orders_collection
        self.users_collection = users_collection
        self.clock = clock or utc_timestamp

        self.orders = []
        self.riders = []
        self.loading = False
        self.error = None
        self.notification = None

        self.search = ''
        self.status_filter = ALL_STATUSES
        self.customer_filter = None
        self.rider_filter = None
        self.date_range = None

        self.editing = None
        self.status_order = None
        self.status_value = ''
        self.assign_order = None
        self.selected_rider_id = None
        self.assign_loading = False

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def initialize(self):
        self.load_orders()
        self.load_eligible_riders()
        return self

    def load_orders(self):
        """Replace the local order list with the full collection"""
        self.loading = True
        try:
            self.orders = list(self.store.list_all(self.orders_collection) or [])
            self.error = None
        except StoreError as e:
            logger.error(f"Error fetching orders: {e}")
            db_log('error', 'orders', LOAD_ORDERS_ERROR, {'error': str(e)})
            self.orders = []
            self.error = LOAD_ORDERS_ERROR
        finally:
            self.loading = False
        return self.orders

    def load_eligible_riders(self):
        """Load approved/active riders; an unavailable user list leaves assignment empty"""
        try:
            users = self.store.list_all(self.users_collection) or []
            self.riders = eligible_riders(users)
        except StoreError as e:
            logger.warning(f"Error fetching riders: {e}")
            db_log('warning', 'riders', 'Failed to fetch riders', {'error': str(e)})
            self.riders = []
        return self.riders

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def set_search(self, term):
        self.search = term or ''

    def set_status_filter(self, status_filter):
        self.status_filter = status_filter or ALL_STATUSES

    def set_scope(self, customer=None, rider=None, date_from=None, date_to=None):
        """Narrow the view to one customer, one rider and/or a createdAt range"""
        if bool(date_from) != bool(date_to):
            raise ValidationError('Both from and to are required for a date range')
        if date_from:
            try:
                parse_timestamp(date_from)
                parse_timestamp(date_to)
            except (TypeError, ValueError):
                raise ValidationError('Invalid date range')
            self.date_range = (date_from, date_to)
        else:
            self.date_range = None
        self.customer_filter = customer or None
        self.rider_filter = rider or None

    def visible_orders(self):
        orders = self.orders
        if self.customer_filter:
            orders = orders_for_customer(orders, self.customer_filter)
        if self.rider_filter:
            orders = orders_for_rider(orders, self.rider_filter)
        if self.date_range:
            orders = orders_in_date_range(orders, *self.date_range)
        return filter_orders(orders, self.search, self.status_filter)

    def rows(self):
        return [display_row(o) for o in self.visible_orders()]

    def pending(self):
        return pending_orders(self.orders)

    def stats(self):
        return order_stats(self.orders)

    def get_order(self, order_id):
        order = find_order(self.orders, order_id)
        if order is None:
            raise ValidationError(f"Order {order_id} not found")
        return order

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _fail(self, message, error, details):
        self.notification = message
        logger.error(f"{message}: {error}")
        LoggingService.log_error_with_traceback('orders', error, details)
        raise MutationError(message, cause=error) from error

    def delete_order(self, order_id, confirmed=False):
        """Delete an order once the admin has confirmed it"""
        if not confirmed:
            raise ConfirmationRequired('Deleting an order requires confirmation')

        try:
            self.store.delete(self.orders_collection, order_id)
        except StoreError as e:
            self._fail('Failed to delete order', e, {'order_id': order_id})

        LoggingService.log_user_action('orders', 'delete order', details={'order_id': order_id})
        self.load_orders()
        return True

    def open_edit(self, order_id):
        self.editing = dict(self.get_order(order_id))
        return self.editing

    def update_edit(self, fields):
        if self.editing is None:
            raise ValidationError('No order is being edited')
        for key, value in fields.items():
            if key != 'id':
                self.editing[key] = value
        return self.editing

    def cancel_edit(self):
        self.editing = None

    def save_edit(self):
        """Send the whole working copy (minus id) with a fresh updatedAt"""
        if self.editing is None:
            raise ValidationError('No order is being edited')

        order_id = self.editing['id']
        payload = {k: v for k, v in self.editing.items() if k != 'id'}
        for field in NUMERIC_EDIT_FIELDS:
            if field in payload:
                payload[field] = to_number(payload[field])
        payload['updatedAt'] = self.clock()

        try:
            self.store.update(self.orders_collection, order_id, payload)
        except StoreError as e:
            self._fail('Failed to update order', e, {'order_id': order_id})

        LoggingService.log_user_action('orders', 'edit order', details={'order_id': order_id})
        self.load_orders()
        self.editing = None
        return find_order(self.orders, order_id)

    def open_status(self, order_id):
        self.status_order = self.get_order(order_id)
        self.status_value = display_status(self.status_order)
        return self.status_value

    def select_status(self, status):
        self.status_value = status

    def close_status(self):
        self.status_order = None
        self.status_value = ''

    def save_status(self):
        """Write only status and updatedAt; any transition is allowed"""
        if self.status_order is None:
            raise ValidationError('No order selected for status change')

        order_id = self.status_order['id']
        payload = {'status': self.status_value, 'updatedAt': self.clock()}

        try:
            self.store.update(self.orders_collection, order_id, payload)
        except StoreError as e:
            self._fail('Failed to save status', e, {'order_id': order_id, 'status': self.status_value})

        LoggingService.log_user_action('orders', 'change status', details={
            'order_id': order_id,
            'from': self.status_order.get('status'),
            'to': self.status_value,
        })
        self.load_orders()
        self.close_status()
        return find_order(self.orders, order_id)

    def open_assign(self, order_id):
        self.assign_order = self.get_order(order_id)
        self.selected_rider_id = assigned_rider_id(self.assign_order)
        return self.selected_rider_id

    @property
    def assign_label(self):
        if self.assign_order is not None and assigned_rider_id(self.assign_order):
            return 'Reassign Rider'
        return 'Assign Rider'

    def select_rider(self, rider_id):
        self.selected_rider_id = rider_id

    def close_assign(self):
        self.assign_order = None
        self.selected_rider_id = None

    def save_assign(self):
        """
        Write the selected rider onto the open order.

        A pending order is promoted to assigned; any other status is kept.
        """
        if self.assign_order is None:
            raise ValidationError('No order selected for assignment')
        if not self.selected_rider_id:
            raise ValidationError('Please select a rider')

        order_id = self.assign_order['id']
        rider = resolve_rider(self.riders, self.selected_rider_id)
        payload = {
            'riderId': rider.key if rider else self.selected_rider_id,
            'riderName': (rider.display_name if rider else '') or None,
            'riderPhone': (rider.phone if rider else '') or None,
            'updatedAt': self.clock(),
        }
        if self.assign_order.get('status') == 'pending':
            payload['status'] = 'assigned'

        self.assign_loading = True
        try:
            self.store.update(self.orders_collection, order_id, payload)
        except StoreError as e:
            self._fail('Failed to assign rider', e, {'order_id': order_id, 'rider_id': self.selected_rider_id})
        finally:
            self.assign_loading = False

        LoggingService.log_user_action('orders', self.assign_label.lower(), details={
            'order_id': order_id,
            'rider_id': payload['riderId'],
        })
        self.load_orders()
        self.close_assign()
        return find_order(self.orders, order_id)
