"""
Order Views
===========

Pure derivations over a loaded order list: display rows, the search and
status filters, the pending subset and the summary statistics.

Nothing here touches the store. Every function takes the orders (and the
filter criteria) explicitly and returns new lists or dicts.
"""

import math
from datetime import datetime, timezone

STATUSES = ['pending', 'assigned', 'in-progress', 'delivered', 'cancelled']
PACKAGE_TYPES = ['small', 'medium', 'large', 'extra-large']
ALL_STATUSES = 'All'

SEARCH_FIELDS = ('customerName', 'customerEmail', 'originCity', 'destinationCity', 'id')


def to_number(value):
    """Parse a numeric field, treating missing or unparsable values as 0"""
    if not value:
        return 0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0
    return result if math.isfinite(result) else 0


def display_status(order):
    """Status shown in the table; a missing status reads as pending"""
    return order.get('status') or 'pending'


def pending_orders(orders):
    """Orders whose stored status is literally 'pending'"""
    return [o for o in orders if o.get('status') == 'pending']


def matches_search(order, term):
    if not term:
        return True
    needle = term.lower()
    for field in SEARCH_FIELDS:
        value = order.get(field)
        if value is not None and needle in str(value).lower():
            return True
    return False


def matches_status(order, status_filter):
    if not status_filter or status_filter == ALL_STATUSES:
        return True
    return order.get('status') == status_filter


def filter_orders(orders, search='', status_filter=ALL_STATUSES):
    """Orders matching both the search term and the status filter, in input order"""
    return [
        o for o in orders
        if matches_search(o, search) and matches_status(o, status_filter)
    ]


def order_stats(orders):
    """Counts and delivered revenue for the summary cards"""
    delivered = [o for o in orders if o.get('status') == 'delivered']
    return {
        'total': len(orders),
        'pending': len(pending_orders(orders)),
        'delivered': len(delivered),
        'revenue': sum(to_number(o.get('price')) for o in delivered),
    }


def find_order(orders, order_id):
    for order in orders:
        if str(order.get('id')) == str(order_id):
            return order
    return None


def assigned_rider_id(order):
    return order.get('riderId') or order.get('riderUid')


def orders_for_customer(orders, user_id):
    return [o for o in orders if o.get('userId') == user_id]


def orders_for_rider(orders, rider_id):
    return [o for o in orders if assigned_rider_id(o) == rider_id]


def parse_timestamp(value):
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def orders_in_date_range(orders, start, end):
    """Orders created between start and end inclusive; undated orders are skipped"""
    start_at = parse_timestamp(start)
    end_at = parse_timestamp(end)
    result = []
    for order in orders:
        try:
            created = parse_timestamp(order.get('createdAt'))
        except (TypeError, ValueError):
            continue
        if start_at <= created <= end_at:
            result.append(order)
    return result


def display_row(order):
    """Table row with the legacy field fallbacks applied"""
    return {
        'id': order.get('id'),
        'customer': order.get('customerName') or order.get('firstName') or order.get('userId'),
        'email': order.get('customerEmail') or order.get('email'),
        'origin': order.get('originCity') or order.get('pickupLocation') or order.get('pickup'),
        'destination': order.get('destinationCity') or order.get('dropLocation') or order.get('drop'),
        'category': order.get('categoryName') or order.get('category'),
        'package': order.get('packageType') or order.get('package'),
        'weight': order.get('weight'),
        'price': order.get('price'),
        'notes': order.get('additionalNotes') or order.get('specialInstructions') or '—',
        'status': display_status(order),
        'rider_id': assigned_rider_id(order),
        'rider_name': order.get('riderName'),
        'rider_phone': order.get('riderPhone'),
        'created_at': order.get('createdAt'),
        'updated_at': order.get('updatedAt'),
    }
