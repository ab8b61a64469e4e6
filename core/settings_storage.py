# core/settings_storage.py
from datetime import datetime

from core.db import SessionLocal
from models.client_setting import ClientSetting

TOKEN_KEY = "auth-token"
ROLE_KEY = "auth-role"


class SettingsStorage:
    """Durable key/value storage backed by the client_settings table."""

    def __init__(self, session_factory=SessionLocal):
        self._session_factory = session_factory

    def get(self, key: str):
        db = self._session_factory()
        try:
            row = db.query(ClientSetting).filter(ClientSetting.key == key).first()
            return row.value if row else None
        finally:
            db.close()

    def set(self, key: str, value: str):
        db = self._session_factory()
        try:
            row = db.query(ClientSetting).filter(ClientSetting.key == key).first()
            if row:
                row.value = value
                row.updated_at = datetime.utcnow()
            else:
                db.add(ClientSetting(key=key, value=value))
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def delete(self, key: str):
        db = self._session_factory()
        try:
            db.query(ClientSetting).filter(ClientSetting.key == key).delete()
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()