# core/realtime.py
import logging
import threading
from enum import Enum
from functools import partial

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError
from socketio.exceptions import SocketIOError

from core.config import (
    SOCKET_RECONNECT_ATTEMPTS,
    SOCKET_RECONNECT_DELAY,
    SOCKET_RECONNECT_DELAY_MAX,
    SOCKET_TIMEOUT,
    SOCKET_URL,
)
from core.notifications import Subscription

logger = logging.getLogger(__name__)

WELCOME = "welcome"
NEW_ORDER = "order:new-order"
STATUS_CHANGE = "order:status-change"
STATUS_PREPARING = "order:status-preparing"
PAYMENT_PROCESSING = "order:payment-processing"
SERVER_EVENTS = (WELCOME, NEW_ORDER, STATUS_CHANGE, STATUS_PREPARING, PAYMENT_PROCESSING)

# Notification keys; a repeated key replaces the toast already on screen
CONNECTION_KEY = "socket-connection"
DISCONNECTION_KEY = "socket-disconnection"
RECONNECTION_KEY = "socket-reconnection"
RECONNECTION_ERROR_KEY = "socket-reconnection-error"
CONNECTION_ERROR_KEY = "socket-connection-error"


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


def backoff_delay(attempt: int, delay: float = SOCKET_RECONNECT_DELAY, delay_max: float = SOCKET_RECONNECT_DELAY_MAX) -> float:
    """Delay before reconnect attempt `attempt` (1-based)."""
    return min(delay * (2 ** (attempt - 1)), delay_max)


class RealtimeChannel:
    """
    The single Socket.IO connection shared by every view.

    Views subscribe to order events and get a Subscription back; disposing it
    detaches exactly that handler. Reconnection is bounded: after the last
    failed attempt the channel stays DISCONNECTED until reconnect() is called.
    """

    def __init__(self, url: str = SOCKET_URL, notifier=None, client=None, sleep=None,
                 attempts: int = SOCKET_RECONNECT_ATTEMPTS,
                 delay: float = SOCKET_RECONNECT_DELAY,
                 delay_max: float = SOCKET_RECONNECT_DELAY_MAX,
                 timeout: float = SOCKET_TIMEOUT):
        self.url = url
        self.notifier = notifier
        self.attempts = attempts
        self.delay = delay
        self.delay_max = delay_max
        self.timeout = timeout
        self.state = ConnectionState.DISCONNECTED

        self._stop = threading.Event()
        self._sleep = sleep or self._stop.wait
        self._lock = threading.RLock()
        self._handlers = {}
        self._reconnect_thread = None

        # Reconnection is driven here, not by the library
        self._sio = client if client is not None else socketio.Client(reconnection=False)
        self._sio.on("connect", self._on_connect)
        self._sio.on("disconnect", self._on_disconnect)
        self._sio.on("connect_error", self._on_connect_error)
        for event in SERVER_EVENTS:
            self._register(event)

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    def _register(self, event: str):
        with self._lock:
            if event in self._handlers:
                return
            self._handlers[event] = []
        self._sio.on(event, partial(self._dispatch, event))

    def _notify(self, level: str, key: str, message: str, **kwargs):
        if self.notifier is not None:
            getattr(self.notifier, level)(key, message, **kwargs)

    # ===================== SUBSCRIPTIONS =====================

    def subscribe(self, event: str, handler) -> Subscription:
        self._register(event)
        with self._lock:
            self._handlers[event].append(handler)

        def detach():
            with self._lock:
                handlers = self._handlers.get(event, [])
                if handler in handlers:
                    handlers.remove(handler)

        return Subscription(detach)

    def listener_count(self, event: str) -> int:
        with self._lock:
            return len(self._handlers.get(event, []))

    def _dispatch(self, event: str, *args):
        payload = args[0] if args else None
        if event == WELCOME:
            logger.info("Server message: %s", payload)
        else:
            logger.debug("Received %s", event)
        with self._lock:
            handlers = list(self._handlers.get(event, []))
        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.exception("Handler for %s failed", event)

    # ===================== CONNECTION =====================

    def _connect_once(self):
        self._sio.connect(self.url, transports=["websocket", "polling"], wait_timeout=self.timeout)

    def connect(self) -> bool:
        with self._lock:
            if self.state in (ConnectionState.CONNECTED, ConnectionState.CONNECTING):
                return True
            if self.state == ConnectionState.RECONNECTING:
                return False
            self.state = ConnectionState.CONNECTING
        self._stop.clear()
        try:
            self._connect_once()
        except SocketConnectionError as ex:
            logger.warning("Socket connection to %s failed: %s", self.url, ex)
            self._notify("error", CONNECTION_ERROR_KEY, "Connection error. Please check your network.")
            self._start_reconnect()
            return False
        self.state = ConnectionState.CONNECTED
        return True

    def reconnect(self) -> bool:
        """Manual retry once automatic reconnection has given up."""
        if self.state != ConnectionState.DISCONNECTED:
            return False
        return self.connect()

    def _start_reconnect(self):
        with self._lock:
            if self._stop.is_set():
                self.state = ConnectionState.DISCONNECTED
                return
            if self._reconnect_thread is not None and self._reconnect_thread.is_alive():
                return
            self.state = ConnectionState.RECONNECTING
            self._reconnect_thread = threading.Thread(target=self.run_reconnect_loop, daemon=True)
            self._reconnect_thread.start()

    def run_reconnect_loop(self) -> bool:
        for attempt in range(1, self.attempts + 1):
            if self._stop.is_set():
                break
            self.state = ConnectionState.RECONNECTING
            logger.info("Socket reconnection attempt %s/%s", attempt, self.attempts)
            self._notify("loading", RECONNECTION_KEY, "Reconnecting to server...")
            self._sleep(backoff_delay(attempt, self.delay, self.delay_max))
            if self._stop.is_set():
                break
            try:
                self._connect_once()
            except SocketConnectionError as ex:
                logger.warning("Socket reconnection attempt %s failed: %s", attempt, ex)
                continue
            self.state = ConnectionState.CONNECTED
            self._notify("success", RECONNECTION_KEY, "Reconnected successfully")
            return True

        self.state = ConnectionState.DISCONNECTED
        if self.notifier is not None:
            self.notifier.dismiss(RECONNECTION_KEY)
        if not self._stop.is_set():
            logger.error("Socket reconnection gave up after %s attempts", self.attempts)
            self._notify("error", RECONNECTION_ERROR_KEY, "Failed to reconnect to the server.")
        return False

    def join(self, timeout: float = None):
        thread = self._reconnect_thread
        if thread is not None:
            thread.join(timeout)

    def close(self):
        self._stop.set()
        if self._sio.connected:
            try:
                self._sio.disconnect()
            except SocketIOError as ex:
                logger.warning("Socket disconnect failed: %s", ex)
        self.join(timeout=1)
        self.state = ConnectionState.DISCONNECTED

    # ===================== LIBRARY CALLBACKS =====================

    def _on_connect(self):
        logger.info("Socket connected to %s", self.url)
        self.state = ConnectionState.CONNECTED
        self._notify("success", CONNECTION_KEY, "Real-time connection established", duration=2.0)

    def _on_disconnect(self, *args):
        logger.info("Socket disconnected %s", args[0] if args else "")
        if self._stop.is_set():
            self.state = ConnectionState.DISCONNECTED
            return
        self._notify("error", DISCONNECTION_KEY, "Real-time connection lost. Reconnecting...")
        self._start_reconnect()

    def _on_connect_error(self, *args):
        logger.error("Socket connection error: %s", args[0] if args else "")
        self._notify("error", CONNECTION_ERROR_KEY, "Connection error. Please check your network.")

    # ===================== EMIT =====================

    def emit(self, event: str, payload) -> bool:
        if not self.is_connected:
            logger.warning("Not connected; %s not sent", event)
            return False
        try:
            self._sio.emit(event, payload)
        except SocketIOError as ex:
            logger.warning("Emit %s failed: %s", event, ex)
            return False
        return True

    def broadcast_status_change(self, order) -> bool:
        """Advisory fan-out of a status change to other clients."""
        return self.emit(STATUS_CHANGE, order.to_payload())

    def broadcast_payment_processing(self, order) -> bool:
        """Tell other clients the POS has started settling `order`."""
        table_number = order.table.table_number if order.table is not None else None
        return self.emit(PAYMENT_PROCESSING, {
            "orderId": order.id,
            "tableId": order.table_id,
            "tableNumber": table_number,
        })
