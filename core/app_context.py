# core/app_context.py
import logging
from dataclasses import dataclass

from core.api_client import ApiClient
from core.db import init_db
from core.logger import setup_logging
from core.notifications import Notifier
from core.realtime import RealtimeChannel
from core.session_manager import SessionStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Process-wide services, created once at startup and handed to every view."""

    session: SessionStore
    api: ApiClient
    channel: RealtimeChannel
    notifier: Notifier

    def close(self):
        self.channel.close()
        self.session.stop_monitor()
        self.api.close()
        logger.info("Services shut down")


def build_context() -> AppContext:
    setup_logging()
    init_db()
    session = SessionStore()
    session.restore()
    notifier = Notifier()
    return AppContext(
        session=session,
        api=ApiClient(session=session),
        channel=RealtimeChannel(notifier=notifier),
        notifier=notifier,
    )
