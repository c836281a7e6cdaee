from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_owned
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.location import Location
from app.models.user import User
from app.schemas.location import LocationCreate, LocationUpdate, Location as LocationSchema

router = APIRouter(prefix="/api/locations", tags=["locations"])


@router.get("", response_model=List[LocationSchema])
def list_locations(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return db.query(Location).filter(Location.owner_id == current_user.id).order_by(Location.name).all()


@router.post("", response_model=LocationSchema, status_code=status.HTTP_201_CREATED)
def create_location(
    data: LocationCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    location = Location(owner_id=current_user.id, **data.model_dump())
    db.add(location)
    db.commit()
    db.refresh(location)
    return location


@router.get("/{location_id}", response_model=LocationSchema)
def get_location(
    location_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_owned(db, Location, location_id, current_user, "Location")


@router.patch("/{location_id}", response_model=LocationSchema)
def update_location(
    location_id: int,
    data: LocationUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    location = get_owned(db, Location, location_id, current_user, "Location")
    # name is required; the platform ids may be cleared
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field == "name":
            continue
        setattr(location, field, value)
    db.commit()
    db.refresh(location)
    return location


@router.delete("/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_location(
    location_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    location = get_owned(db, Location, location_id, current_user, "Location")
    db.delete(location)
    db.commit()
