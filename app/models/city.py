from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from .base import Base


class City(Base):
    __tablename__ = "cities"

    name = Column(String(100), nullable=False, unique=True, index=True)
    image_url = Column(String(500), nullable=False)

    users = relationship("User", back_populates="city", passive_deletes=True)
