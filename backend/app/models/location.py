"""Business locations and their review-platform identifiers."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Location(Base):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    address = Column(String, nullable=True)

    # Platform IDs (used to build the review link)
    google_place_id = Column(String, nullable=True)
    yelp_business_id = Column(String, nullable=True)
    facebook_page_id = Column(String, nullable=True)
    apple_maps_id = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    owner = relationship("User", back_populates="locations")
