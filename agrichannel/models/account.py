from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from agrichannel.core.database import Base


class Account(Base):
    """
    A registered identity.

    There is no username: an account is found by the SHA-256 fingerprint of
    its password, so one password maps to exactly one account.
    """

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    password_hash = Column(String(255), nullable=False)
    password_sig = Column(String(64), unique=True, index=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    posts = relationship("Post", back_populates="owner")
