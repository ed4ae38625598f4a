from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from agrichannel.core.database import Base


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    owner_user_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)

    item_name = Column(String(255), nullable=False)

    # stored filename under the upload root, not a URL
    image = Column(String(255), nullable=True)

    location = Column(String(255), nullable=False, default="")
    phone = Column(String(64), nullable=False, default="")
    price = Column(String(64), nullable=False, default="")
    description = Column(Text, nullable=False, default="")

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    owner = relationship("Account", back_populates="posts")
