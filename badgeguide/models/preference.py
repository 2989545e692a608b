from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from badgeguide.db import Base

class Preference(Base):
    __tablename__ = "preferences"

    key        = Column(String(40), primary_key=True)
    value      = Column(String(255), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
