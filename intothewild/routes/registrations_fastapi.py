# -*- coding: utf-8 -*-
"""
Trek registration routes. The workflow itself lives in services.registration;
failures come back as WorkflowError and are rendered by the app handler.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from intothewild import auth
from intothewild.database import get_db
from intothewild.models.registration import Registration
from intothewild.models.user import User
from intothewild.schemas.registration import RegistrationCreate, RegistrationRead
from intothewild.services import registration as registration_service
from intothewild.storage import ObjectStorage, get_storage

router = APIRouter(
    tags=["Registrations"],
)

@router.post("", response_model=RegistrationRead, status_code=status.HTTP_201_CREATED)
def register_for_trek(
    payload: RegistrationCreate,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(auth.get_optional_user)
):
    return registration_service.register_for_trek(db, current_user, payload)

@router.get("/me", response_model=List[RegistrationRead])
def read_my_registrations(
    db: Session = Depends(get_db),
    current_user: User = Depends(auth.get_current_active_user)
):
    return db.query(Registration).filter(
        Registration.user_id == current_user.id
    ).order_by(Registration.booking_datetime.desc()).all()

@router.get("/trek/{trek_id}", response_model=List[RegistrationRead], dependencies=[Depends(auth.get_admin_user)])
def read_registrations_for_trek(trek_id: int, status_filter: Optional[str] = None, db: Session = Depends(get_db)):
    query = db.query(Registration).filter(Registration.trek_id == trek_id)
    if status_filter:
        query = query.filter(Registration.payment_status == status_filter)
    return query.order_by(Registration.booking_datetime).all()

@router.post("/{registration_id}/payment-proof", response_model=RegistrationRead)
def upload_payment_proof(
    registration_id: int,
    payer_name: Optional[str] = Form(None),
    payer_phone: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    current_user: User = Depends(auth.get_current_active_user)
):
    return registration_service.upload_payment_proof(
        db, storage, current_user, registration_id,
        file.file if file is not None else None,
        file.filename if file is not None else "",
        file.content_type if file is not None else "",
        payer_name, payer_phone,
    )

@router.post("/{registration_id}/cancel", response_model=RegistrationRead)
def cancel_registration(
    registration_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(auth.get_current_active_user)
):
    return registration_service.cancel_registration(db, current_user, registration_id)

@router.post("/{registration_id}/verify-payment", response_model=RegistrationRead, dependencies=[Depends(auth.get_admin_user)])
def verify_payment(registration_id: int, db: Session = Depends(get_db)):
    return registration_service.verify_payment(db, registration_id)
