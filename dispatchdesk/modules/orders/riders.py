"""
Riders
======

Rider accounts are user documents with role "rider" and an approved or
active status. Each one is normalized once at load time so the rest of the
module works with a single key.
"""

ELIGIBLE_RIDER_STATUSES = ('approved', 'Active')


class Rider:
    """A user account eligible for delivery assignment"""

    def __init__(self, doc):
        self.doc = dict(doc)
        self.id = doc.get('id')
        self.uid = doc.get('uid')
        self.key = self.id or self.uid

    @property
    def display_name(self):
        first = self.doc.get('firstName')
        if first:
            return f"{first} {self.doc.get('lastName') or ''}".strip()
        return self.doc.get('name') or ''

    @property
    def phone(self):
        return self.doc.get('phone') or self.doc.get('driverPhone') or ''

    @property
    def contact(self):
        return self.doc.get('email') or self.doc.get('phone') or ''

    def to_dict(self):
        return {
            'key': self.key,
            'id': self.id,
            'uid': self.uid,
            'name': self.display_name,
            'phone': self.phone,
            'contact': self.contact,
            'email': self.doc.get('email'),
        }

    def __repr__(self):
        return f"<Rider {self.key} {self.display_name!r}>"


def is_eligible_rider(user):
    role = (user.get('role') or '').lower()
    return role == 'rider' and user.get('status') in ELIGIBLE_RIDER_STATUSES


def eligible_riders(users):
    """Normalize the rider subset of a user collection"""
    return [Rider(u) for u in users if is_eligible_rider(u)]


def resolve_rider(riders, selected_id):
    """First rider matching on id, then on uid; None when nothing matches"""
    if not selected_id:
        return None
    for rider in riders:
        if rider.id is not None and rider.id == selected_id:
            return rider
    for rider in riders:
        if rider.uid is not None and rider.uid == selected_id:
            return rider
    return None
