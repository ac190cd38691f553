from sqlalchemy import Column, DateTime, String, Text, func

from .db import Base


class StoredCollection(Base):
    """One named JSON collection (accounts, products, transactions, session)."""

    __tablename__ = "stored_collections"
    key = Column(String, primary_key=True)
    payload = Column(Text, nullable=False)  # JSON document
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
