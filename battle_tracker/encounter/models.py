from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship

from ..database import Base


class Encounter(Base):
    __tablename__ = "encounters"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, default="")
    created_at = Column(DateTime, default=datetime.utcnow)

    combatants = relationship(
        "EncounterCombatant",
        back_populates="encounter",
        cascade="all, delete-orphan",
        order_by="EncounterCombatant.position",
    )


class EncounterCombatant(Base):
    __tablename__ = "encounter_combatants"

    id = Column(Integer, primary_key=True, index=True)
    encounter_id = Column(Integer, ForeignKey("encounters.id"), nullable=False)
    position = Column(Integer, default=0)  # display order within the encounter

    base_name = Column(String(100), nullable=False)
    display_name = Column(String(100), nullable=False)
    template = Column(JSON, nullable=False)  # Creature stat block this combatant was stamped from

    current_hp = Column(Integer, nullable=False)
    max_hp = Column(Integer, nullable=False)
    temp_hp = Column(Integer, default=0)
    trackers = Column(JSON, default=dict)  # spell slots, recharge, limited uses, legendary pips

    encounter = relationship("Encounter", back_populates="combatants")
