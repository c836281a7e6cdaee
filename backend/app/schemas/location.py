from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class LocationBase(BaseModel):
    name: str
    address: Optional[str] = None
    google_place_id: Optional[str] = None
    yelp_business_id: Optional[str] = None
    facebook_page_id: Optional[str] = None
    apple_maps_id: Optional[str] = None


class LocationCreate(LocationBase):
    pass


class LocationUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    google_place_id: Optional[str] = None
    yelp_business_id: Optional[str] = None
    facebook_page_id: Optional[str] = None
    apple_maps_id: Optional[str] = None


class Location(LocationBase):
    id: int
    owner_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
