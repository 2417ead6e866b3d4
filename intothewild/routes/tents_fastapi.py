# -*- coding: utf-8 -*-
"""
Tent rental routes.
"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, joinedload

from intothewild import auth
from intothewild.database import get_db
from intothewild.models.tent import TentType, TentInventory, TentRequest
from intothewild.models.trek import TrekEvent
from intothewild.models.user import User
from intothewild.schemas.tent import (
    TentTypeCreate, TentTypeRead, TentInventoryUpdate, TentInventoryRead,
    TentRequestCreate, TentRequestRead, TentRequestReview
)
from intothewild.services import tents as tent_service

router = APIRouter(
    tags=["Tents"],
)

def _inventory_read(inventory: TentInventory) -> TentInventoryRead:
    data = TentInventoryRead.model_validate(inventory)
    data.available = tent_service.available_quantity(inventory)
    return data

def _get_request_or_404(db: Session, request_id: int) -> TentRequest:
    tent_request = db.query(TentRequest).filter(TentRequest.id == request_id).first()
    if tent_request is None:
        raise HTTPException(status_code=404, detail="Tent request not found")
    return tent_request

@router.get("/types", response_model=List[TentTypeRead])
def read_tent_types(db: Session = Depends(get_db)):
    return db.query(TentType).order_by(TentType.name).all()

@router.post("/types", response_model=TentTypeRead, status_code=status.HTTP_201_CREATED, dependencies=[Depends(auth.get_admin_user)])
def create_tent_type(tent_type: TentTypeCreate, db: Session = Depends(get_db)):
    if db.query(TentType).filter(TentType.name == tent_type.name).first():
        raise HTTPException(status_code=400, detail="Tent type already exists")
    db_tent_type = TentType(**tent_type.model_dump())
    db.add(db_tent_type)
    db.commit()
    db.refresh(db_tent_type)
    return db_tent_type

@router.put("/inventory", response_model=TentInventoryRead, dependencies=[Depends(auth.get_admin_user)])
def set_tent_inventory(payload: TentInventoryUpdate, db: Session = Depends(get_db)):
    if not db.query(TrekEvent.id).filter(TrekEvent.id == payload.event_id).first():
        raise HTTPException(status_code=404, detail="Trek not found")
    if not db.query(TentType.id).filter(TentType.id == payload.tent_type_id).first():
        raise HTTPException(status_code=404, detail="Tent type not found")

    inventory = db.query(TentInventory).filter(
        TentInventory.event_id == payload.event_id,
        TentInventory.tent_type_id == payload.tent_type_id
    ).first()
    if inventory is None:
        inventory = TentInventory(event_id=payload.event_id, tent_type_id=payload.tent_type_id, reserved_count=0)
        db.add(inventory)
    elif payload.total_available < inventory.reserved_count:
        raise HTTPException(status_code=400, detail=f"{inventory.reserved_count} tents are already reserved")

    inventory.total_available = payload.total_available
    db.commit()
    db.refresh(inventory)
    return _inventory_read(inventory)

@router.get("/events/{event_id}", response_model=List[TentInventoryRead])
def read_event_tents(event_id: int, db: Session = Depends(get_db)):
    rows = db.query(TentInventory).options(joinedload(TentInventory.tent_type)).filter(
        TentInventory.event_id == event_id
    ).order_by(TentInventory.id).all()
    return [_inventory_read(row) for row in rows]

@router.post("/requests", response_model=TentRequestRead)
def submit_tent_request(
    payload: TentRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(auth.get_current_active_user)
):
    return tent_service.submit_tent_request(db, current_user, payload)

@router.get("/requests/me", response_model=List[TentRequestRead])
def read_my_tent_requests(
    db: Session = Depends(get_db),
    current_user: User = Depends(auth.get_current_active_user)
):
    return db.query(TentRequest).filter(TentRequest.user_id == current_user.id).order_by(TentRequest.created_at.desc()).all()

@router.get("/requests/event/{event_id}", response_model=List[TentRequestRead], dependencies=[Depends(auth.get_admin_user)])
def read_event_tent_requests(event_id: int, db: Session = Depends(get_db)):
    return db.query(TentRequest).filter(TentRequest.event_id == event_id).order_by(TentRequest.created_at).all()

@router.post("/requests/{request_id}/cancel", response_model=TentRequestRead)
def cancel_tent_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(auth.get_current_active_user)
):
    return tent_service.cancel_tent_request(db, current_user, _get_request_or_404(db, request_id))

@router.post("/requests/{request_id}/review", response_model=TentRequestRead, dependencies=[Depends(auth.get_admin_user)])
def review_tent_request(request_id: int, review: TentRequestReview, db: Session = Depends(get_db)):
    tent_request = _get_request_or_404(db, request_id)
    return tent_service.review_tent_request(db, tent_request, review.action, review.admin_notes)
