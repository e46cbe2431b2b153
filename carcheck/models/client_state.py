# carcheck/models/client_state.py
"""
Per-client persisted key/value state.
Holds the subscription tier under settings.TIER_STORAGE_KEY — the server-side
counterpart of the browser's local storage.
"""

from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint
from carcheck.database import Base


class ClientState(Base):
    __tablename__ = "client_state"
    __table_args__ = (UniqueConstraint("client_id", "key", name="uq_client_state_client_key"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(String(100), nullable=False, index=True)
    key = Column(String(100), nullable=False)
    value = Column(String(500))
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<ClientState {self.client_id}:{self.key}={self.value}>"
