from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime
from core.db import Base


class ClientSetting(Base):
    """Durable key/value pair kept on the device (auth token, role)."""
    __tablename__ = "client_settings"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String, unique=True, nullable=False, index=True)
    value = Column(String, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<ClientSetting {self.key}>"
