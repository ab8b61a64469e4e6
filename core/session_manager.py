import logging
import threading
import time

from jose import JWTError, jwt

from core.config import SESSION_CHECK_INTERVAL
from core.notifications import Subscription
from core.settings_storage import SettingsStorage, TOKEN_KEY, ROLE_KEY
from models.user import Role

logger = logging.getLogger(__name__)


def decode_token_expiry(token: str):
    """
    Return the `exp` claim of a JWT-style token, or None when it cannot be read.

    The signature is not checked; the backend does that on every request.
    """
    if not token:
        return None
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError as ex:
        logger.debug("Token claims could not be decoded: %s", ex)
        return None
    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return None
    return float(exp)


class SessionStore:
    """
    Bearer token and role of the signed-in user, kept in durable storage.

    A background monitor re-checks the token expiry every `check_interval`
    seconds while a session is active and forces a logout when it lapses.
    """

    def __init__(self, storage=None, clock=time.time, check_interval: float = SESSION_CHECK_INTERVAL):
        self._storage = storage or SettingsStorage()
        self._clock = clock
        self.check_interval = check_interval
        self._lock = threading.RLock()
        self._logout_listeners = []
        self._monitor_thread = None
        self._monitor_stop = threading.Event()

    # ===================== STATE =====================

    @property
    def token(self):
        return self._storage.get(TOKEN_KEY)

    @property
    def role(self):
        return Role.parse(self._storage.get(ROLE_KEY))

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def has_role(self, role: Role) -> bool:
        return self.role == role

    def is_expired(self) -> bool:
        """True for a missing, malformed or lapsed token."""
        exp = decode_token_expiry(self.token)
        if exp is None:
            return True
        return exp < self._clock()

    def is_valid(self) -> bool:
        return self.is_authenticated and not self.is_expired()

    # ===================== LOGIN / LOGOUT =====================

    def login(self, token: str, role=None):
        with self._lock:
            self._storage.set(TOKEN_KEY, token)
            parsed = Role.parse(role)
            if parsed is not None:
                self._storage.set(ROLE_KEY, str(int(parsed)))
            else:
                # Signed up but not yet role-assigned
                self._storage.delete(ROLE_KEY)
        logger.info("Session started (role=%s)", parsed.name if parsed is not None else "none")

    def logout(self):
        """Clear token and role and notify listeners. Callable from any thread."""
        with self._lock:
            had_token = self.is_authenticated
            self._storage.delete(TOKEN_KEY)
            self._storage.delete(ROLE_KEY)
            listeners = list(self._logout_listeners)
        self.stop_monitor()
        if had_token:
            logger.info("Session ended")
        for listener in listeners:
            try:
                listener()
            except Exception:
                logger.exception("Logout listener failed")

    def on_logout(self, listener) -> Subscription:
        with self._lock:
            self._logout_listeners.append(listener)

        def detach():
            with self._lock:
                if listener in self._logout_listeners:
                    self._logout_listeners.remove(listener)

        return Subscription(detach)

    def restore(self) -> bool:
        """At startup: drop a stored token that has already expired."""
        if not self.is_authenticated:
            return False
        if self.is_expired():
            logger.info("Stored session has expired")
            self.logout()
            return False
        return True

    # ===================== EXPIRY MONITOR =====================

    def check_expiry(self) -> bool:
        """One monitor tick. Returns False when the session was ended."""
        if not self.is_authenticated:
            return False
        if self.is_expired():
            logger.info("Token expired during session, logging out")
            self.logout()
            return False
        return True

    @property
    def monitor_active(self) -> bool:
        thread = self._monitor_thread
        return thread is not None and thread.is_alive()

    def start_monitor(self):
        with self._lock:
            if self.monitor_active:
                return
            self._monitor_stop = threading.Event()
            stop = self._monitor_stop

            def session_monitor():
                logger.debug("Session monitor started")
                while not stop.wait(self.check_interval):
                    if not self.check_expiry():
                        break
                logger.debug("Session monitor ended")

            self._monitor_thread = threading.Thread(target=session_monitor, name="session-monitor", daemon=True)
            self._monitor_thread.start()

    def stop_monitor(self):
        with self._lock:
            self._monitor_stop.set()
            thread = self._monitor_thread
            self._monitor_thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1)
