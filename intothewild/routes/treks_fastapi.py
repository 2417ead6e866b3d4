# -*- coding: utf-8 -*-
"""
Trek event routes: public listing/details and admin management.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from intothewild import auth
from intothewild.database import get_db
from intothewild.models.id_proof import IdType, TrekRequiredIdType
from intothewild.models.registration import Registration, CANCELLED
from intothewild.models.tent import TentRequest
from intothewild.models.trek import TrekEvent
from intothewild.models.user import User
from intothewild.pricing import calculate_gst_price
from intothewild.schemas.id_proof import IdTypeRead
from intothewild.schemas.trek import (
    TrekCreate, TrekRead, TrekUpdate, CapacityRead, IdRequirementsUpdate, CarpoolDriver, CarpoolSummary
)
from intothewild.services import capacity

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Treks"],
)

def _get_trek_or_404(db: Session, trek_id: int) -> TrekEvent:
    db_trek = db.query(TrekEvent).filter(TrekEvent.id == trek_id).first()
    if db_trek is None:
        raise HTTPException(status_code=404, detail="Trek not found")
    return db_trek

def _trek_read(trek: TrekEvent, participant_count: int, is_registered: bool = False) -> TrekRead:
    trek_data = TrekRead.model_validate(trek)
    gate = capacity.capacity_status(trek, participant_count)
    trek_data.participant_count = gate.participant_count
    trek_data.spots_left = gate.spots_left
    trek_data.cost_with_gst = calculate_gst_price(trek.cost or 0)
    trek_data.is_registered = is_registered
    return trek_data

def _registered_trek_ids(db: Session, user: Optional[User]) -> set:
    if user is None:
        return set()
    rows = db.query(Registration.trek_id).filter(
        Registration.user_id == user.id,
        Registration.payment_status != CANCELLED
    ).all()
    return {row.trek_id for row in rows}

@router.post("", response_model=TrekRead, status_code=status.HTTP_201_CREATED, dependencies=[Depends(auth.get_admin_user)])
def create_trek(trek: TrekCreate, db: Session = Depends(get_db)):
    db_trek = TrekEvent(**trek.model_dump())
    db.add(db_trek)
    db.commit()
    db.refresh(db_trek)
    return _trek_read(db_trek, 0)

@router.get("", response_model=List[TrekRead])
def read_treks(
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(auth.get_optional_user)
):
    treks = db.query(TrekEvent).order_by(TrekEvent.start_datetime.asc()).all()
    counts = capacity.count_active_participants_by_trek(db, [t.id for t in treks])
    registered_ids = _registered_trek_ids(db, current_user)
    return [_trek_read(t, counts.get(t.id, 0), t.id in registered_ids) for t in treks]

@router.get("/{trek_id}", response_model=TrekRead)
def read_trek(
    trek_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(auth.get_optional_user)
):
    db_trek = _get_trek_or_404(db, trek_id)
    count = capacity.count_active_participants(db, trek_id)
    return _trek_read(db_trek, count, trek_id in _registered_trek_ids(db, current_user))

@router.get("/{trek_id}/capacity", response_model=CapacityRead)
def read_trek_capacity(trek_id: int, db: Session = Depends(get_db)):
    db_trek = _get_trek_or_404(db, trek_id)
    return CapacityRead(**capacity.check_capacity(db, db_trek)._asdict())

@router.put("/{trek_id}", response_model=TrekRead, dependencies=[Depends(auth.get_admin_user)])
def update_trek(trek_id: int, trek: TrekUpdate, db: Session = Depends(get_db)):
    db_trek = _get_trek_or_404(db, trek_id)

    for key, value in trek.model_dump(exclude_unset=True).items():
        setattr(db_trek, key, value)

    db.commit()
    db.refresh(db_trek)
    return _trek_read(db_trek, capacity.count_active_participants(db, trek_id))

@router.delete("/{trek_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(auth.get_admin_user)])
def delete_trek(trek_id: int, db: Session = Depends(get_db)):
    db_trek = _get_trek_or_404(db, trek_id)
    # Registrations are history and are never deleted
    if db.query(Registration.id).filter(Registration.trek_id == trek_id).first():
        raise HTTPException(status_code=409, detail="This trek has registrations and cannot be deleted. Cancel it instead.")
    if db.query(TentRequest.id).filter(TentRequest.event_id == trek_id).first():
        raise HTTPException(status_code=409, detail="This trek has tent requests and cannot be deleted. Cancel it instead.")
    db.delete(db_trek) # requirement and tent inventory rows go with it
    db.commit()
    logger.info(f"Trek {trek_id} deleted")
    return None

# --- ID REQUIREMENTS ---

@router.get("/{trek_id}/id-requirements", response_model=List[IdTypeRead])
def read_trek_id_requirements(trek_id: int, db: Session = Depends(get_db)):
    _get_trek_or_404(db, trek_id)
    return db.query(IdType).join(
        TrekRequiredIdType, TrekRequiredIdType.id_type_id == IdType.id
    ).filter(TrekRequiredIdType.trek_id == trek_id).order_by(IdType.name).all()

@router.put("/{trek_id}/id-requirements", response_model=List[IdTypeRead], dependencies=[Depends(auth.get_admin_user)])
def replace_trek_id_requirements(trek_id: int, payload: IdRequirementsUpdate, db: Session = Depends(get_db)):
    db_trek = _get_trek_or_404(db, trek_id)
    wanted = set(payload.id_type_ids)
    id_types = db.query(IdType).filter(IdType.id.in_(wanted)).all() if wanted else []
    if len(id_types) != len(wanted):
        raise HTTPException(status_code=400, detail="Unknown ID type in the requirement list")

    current = {req.id_type_id: req for req in db_trek.required_id_types}
    for id_type_id, req in current.items():
        if id_type_id not in wanted:
            db_trek.required_id_types.remove(req)
    for id_type_id in wanted - set(current):
        db_trek.required_id_types.append(TrekRequiredIdType(id_type_id=id_type_id))
    db.commit()
    return sorted(id_types, key=lambda t: t.name)

# --- CARPOOL ---

@router.get("/{trek_id}/carpool", response_model=CarpoolSummary)
def read_trek_carpool(trek_id: int, db: Session = Depends(get_db)):
    _get_trek_or_404(db, trek_id)
    active = db.query(Registration).filter(
        Registration.trek_id == trek_id,
        Registration.payment_status != CANCELLED
    ).order_by(Registration.booking_datetime).all()

    drivers = [
        CarpoolDriver(
            registration_id=r.id, user_id=r.user_id,
            registrant_name=r.registrant_name, offered_seats=r.offered_seats
        )
        for r in active if r.is_driver
    ]
    total_seats = sum(d.offered_seats for d in drivers)
    passengers = len(active) - len(drivers)
    return CarpoolSummary(
        trek_id=trek_id,
        drivers=drivers,
        total_offered_seats=total_seats,
        passengers=passengers,
        seats_short=max(0, passengers - total_seats),
    )
