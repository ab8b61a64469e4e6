# core/order_lifecycle.py
"""
Order status state machine and the per-view working set of orders.

Each role-specific screen owns one OrderWorkingSet. It loads a snapshot over
REST and keeps it in sync with realtime events: an order whose new status
belongs to the view is inserted or replaced, one whose status moved elsewhere
is removed. Applying the same event twice leaves the set unchanged.
"""
import logging
import threading
from datetime import datetime, timedelta, timezone
from enum import Enum

from pydantic import ValidationError as PayloadError

from core.config import RECENT_ORDER_HOURS
from core.errors import IllegalTransitionError, ResponseFormatError, RestaurantClientError
from core.notifications import Subscription
from core.order_service import update_order_status
from core.realtime import NEW_ORDER, STATUS_CHANGE, STATUS_PREPARING
from models.order import Order, OrderStatus
from models.user import Role

logger = logging.getLogger(__name__)

S = OrderStatus

TRANSITIONS = {
    S.PENDING: {S.PREPARING, S.CANCELLED},
    S.PREPARING: {S.READY},
    S.READY: {S.DELIVERED},
    S.DELIVERED: {S.COMPLETED},
    S.COMPLETED: set(),
    S.CANCELLED: set(),
}

TRANSITION_ROLES = {
    (S.PENDING, S.PREPARING): {Role.WAITER, Role.ADMIN},
    (S.PREPARING, S.READY): {Role.CHEF, Role.ADMIN},
    (S.READY, S.DELIVERED): {Role.WAITER, Role.ADMIN},
    (S.DELIVERED, S.COMPLETED): {Role.POS_ADMIN, Role.ADMIN},
    (S.PENDING, S.CANCELLED): {Role.ADMIN},
}

# Lifecycle position, used to sort views that mix statuses
STATUS_ORDER = [S.PENDING, S.PREPARING, S.READY, S.DELIVERED, S.COMPLETED, S.CANCELLED]


def can_transition(current, target, role=None) -> bool:
    current, target = OrderStatus(current), OrderStatus(target)
    if target not in TRANSITIONS[current]:
        return False
    if role is None:
        return True
    return Role.parse(role) in TRANSITION_ROLES.get((current, target), set())


def is_terminal(status) -> bool:
    return not TRANSITIONS[OrderStatus(status)]


class OrderView(str, Enum):
    CHEF = "chef"
    WAITER = "waiter"
    POS = "pos"
    POS_HISTORY = "pos-history"
    CUSTOMER = "customer"


VIEW_BUCKETS = {
    OrderView.CHEF: {S.PREPARING: "preparing"},
    OrderView.WAITER: {
        S.PENDING: "pending",
        S.PREPARING: "preparing",
        S.READY: "ready",
        S.DELIVERED: "delivered",
        S.COMPLETED: "completed",
    },
    OrderView.POS: {S.DELIVERED: "delivered"},
    OrderView.POS_HISTORY: {S.DELIVERED: "delivered", S.COMPLETED: "completed"},
    OrderView.CUSTOMER: {
        S.PENDING: "pending",
        S.PREPARING: "preparing",
        S.READY: "ready",
        S.DELIVERED: "delivered",
    },
}

VIEW_EVENTS = {
    OrderView.CHEF: (STATUS_CHANGE, STATUS_PREPARING),
    OrderView.WAITER: (STATUS_CHANGE, NEW_ORDER, STATUS_PREPARING),
    OrderView.POS: (STATUS_CHANGE,),
    OrderView.POS_HISTORY: (STATUS_CHANGE,),
    OrderView.CUSTOMER: (STATUS_CHANGE, NEW_ORDER, STATUS_PREPARING),
}

# Status assumed when an event payload leaves it out
EVENT_DEFAULT_STATUS = {
    NEW_ORDER: S.PENDING,
    STATUS_PREPARING: S.PREPARING,
}


def bucket_for(view, status):
    """Bucket a status falls in for a view, or None if the view does not show it."""
    return VIEW_BUCKETS[OrderView(view)].get(OrderStatus(status))


def decode_order(payload, default_status=None):
    """Order from a realtime payload; None when it cannot be read."""
    if isinstance(payload, dict) and "order" in payload and "status" not in payload:
        payload = payload["order"]
    if not isinstance(payload, dict):
        return None
    if default_status is not None and not payload.get("status"):
        payload = {**payload, "status": default_status.value}
    try:
        return Order.model_validate(payload)
    except PayloadError:
        logger.debug("Ignoring undecodable order payload: %r", payload)
        return None


def _created(order: Order) -> float:
    return order.created_at.timestamp() if order.created_at else 0.0


def _newest_first(orders):
    return sorted(orders, key=lambda o: (_created(o), o.id), reverse=True)


def _by_status(orders):
    return sorted(orders, key=lambda o: (STATUS_ORDER.index(o.status), -_created(o), -o.id))


class OrderWorkingSet:
    def __init__(self, view, fetch, channel=None, table_id=None, clock=None):
        self.view = OrderView(view)
        self.channel = channel
        self.table_id = table_id
        self._fetch = fetch
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = threading.RLock()
        self._orders = {}
        self._subscriptions = []
        self._listeners = []
        self._generation = 0
        self._pending = None
        self.mounted = False
        self.loading = False
        self.error = None
        self.selected_id = None
        self.unread = {bucket: 0 for bucket in self.buckets}

    @property
    def buckets(self):
        return list(dict.fromkeys(VIEW_BUCKETS[self.view].values()))

    # ===================== LIFECYCLE =====================

    def mount(self):
        """Subscribe first, then load; events seen during the load are replayed on the snapshot."""
        with self._lock:
            if self.mounted:
                return
            self.mounted = True
            self._generation += 1
            generation = self._generation
        if self.channel is not None:
            for event in VIEW_EVENTS[self.view]:
                handler = self._handler(event)
                self._subscriptions.append(self.channel.subscribe(event, handler))
        self._load(generation)

    def unmount(self):
        with self._lock:
            self.mounted = False
            self._generation += 1
            self._pending = None
            subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.dispose()

    def retry(self):
        with self._lock:
            if not self.mounted:
                return
            generation = self._generation
        self._load(generation)

    def _load(self, generation):
        with self._lock:
            self._pending = []
            self.loading = True
            self.error = None
        self._changed()
        orders, error = None, None
        try:
            orders = self._fetch()
        except RestaurantClientError as ex:
            error = ex
            logger.error("Loading %s orders failed: %s", self.view.value, ex)
        except Exception as ex:
            # Undecodable or unexpected snapshot bodies
            error = ResponseFormatError("Received orders in an unexpected format")
            logger.exception("Loading %s orders failed: %s", self.view.value, ex)

        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding %s snapshot fetched after unmount", self.view.value)
                return
            try:
                if error is None:
                    self._orders = {o.id: o for o in orders if self._bucket_of(o) is not None}
                    for order in self._pending or []:
                        self._apply_locked(order)
                    self._fix_selection()
                self.error = error
            finally:
                self._pending = None
                self.loading = False
        self._changed()

    def _handler(self, event):
        default_status = EVENT_DEFAULT_STATUS.get(event)

        def handle(payload):
            order = decode_order(payload, default_status)
            if order is not None:
                self.apply(order)

        return handle

    # ===================== RECONCILIATION =====================

    def _bucket_of(self, order: Order):
        if self.view == OrderView.CUSTOMER and self.table_id is not None and order.table_id != self.table_id:
            return None
        return bucket_for(self.view, order.status)

    def apply(self, order: Order):
        """Insert, replace or remove `order` according to its status. Idempotent."""
        with self._lock:
            if not self.mounted:
                return None
            if self._pending is not None:
                self._pending.append(order)
                return None
            result = self._apply_locked(order)
        if result:
            self._changed()
        return result

    def _apply_locked(self, order: Order):
        bucket = self._bucket_of(order)
        previous = self._orders.get(order.id)
        if bucket is None:
            if previous is None:
                return None
            del self._orders[order.id]
            self._fix_selection()
            return "removed"
        self._orders[order.id] = order
        if previous is None:
            self.unread[bucket] += 1
            return "inserted"
        if self._bucket_of(previous) != bucket:
            self.unread[bucket] += 1
        return "replaced"

    def remove(self, order_id: int) -> bool:
        with self._lock:
            if self._orders.pop(order_id, None) is None:
                return False
            self._fix_selection()
        self._changed()
        return True

    # ===================== SELECTION =====================

    def _fix_selection(self):
        if self.selected_id is not None and self.selected_id not in self._orders:
            remaining = self.orders()
            self.selected_id = remaining[0].id if remaining else None

    def select(self, order_id):
        with self._lock:
            self.selected_id = order_id if order_id in self._orders else None
        self._changed()

    @property
    def selected(self):
        with self._lock:
            return self._orders.get(self.selected_id)

    # ===================== QUERIES =====================

    def get(self, order_id):
        with self._lock:
            return self._orders.get(order_id)

    def __contains__(self, order_id):
        with self._lock:
            return order_id in self._orders

    def __len__(self):
        with self._lock:
            return len(self._orders)

    def orders(self, bucket=None):
        with self._lock:
            orders = [o for o in self._orders.values() if bucket is None or self._bucket_of(o) == bucket]
        if bucket is None and self.view == OrderView.POS_HISTORY:
            return _by_status(orders)
        return _newest_first(orders)

    def counts(self):
        counts = {bucket: 0 for bucket in self.buckets}
        with self._lock:
            for order in self._orders.values():
                counts[self._bucket_of(order)] += 1
        return counts

    def recent(self, hours=RECENT_ORDER_HOURS, bucket=None):
        cutoff = self._clock() - timedelta(hours=hours)
        return [o for o in self.orders(bucket) if o.created_at is not None and o.created_at >= cutoff]

    def on_day(self, day, bucket=None, tz=None):
        return [
            o for o in self.orders(bucket)
            if o.created_at is not None and o.created_at.astimezone(tz).date() == day
        ]

    def search(self, text: str, bucket=None):
        needle = (text or "").strip().lower()
        if not needle:
            return self.orders(bucket)
        result = []
        for order in self.orders(bucket):
            haystack = [str(order.id), order.table_label.lower()]
            haystack.extend(line.name.lower() for line in order.order_items)
            if any(needle in value for value in haystack):
                result.append(order)
        return result

    def mark_seen(self, bucket):
        with self._lock:
            self.unread[bucket] = 0
        self._changed()

    # ===================== CHANGE LISTENERS =====================

    def on_change(self, listener) -> Subscription:
        with self._lock:
            self._listeners.append(listener)

        def detach():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return Subscription(detach)

    def _changed(self):
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception:
                logger.exception("Order list listener failed")


def advance_order(api, channel, working_set, order_id: int, status, role=None) -> Order:
    """Move an order one step along the lifecycle and tell the other screens."""
    status = OrderStatus(status)
    current = working_set.get(order_id) if working_set is not None else None
    if current is not None and not can_transition(current.status, status, role):
        raise IllegalTransitionError(current.status.value, status.value)
    updated = update_order_status(api, order_id, status)
    if channel is not None:
        channel.broadcast_status_change(updated)
    if working_set is not None:
        working_set.apply(updated)
    return updated
