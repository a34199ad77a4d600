from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON

from ..database import Base


class PlayerGroup(Base):
    __tablename__ = "player_groups"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    characters = Column(JSON, default=list)  # [{"name": "Aria", "image_url": ""}]
    created_at = Column(DateTime, default=datetime.utcnow)
