# -*- coding: utf-8 -*-
"""
Trek registration workflow: register, upload payment proof, verify, cancel.

Registration status moves Pending -> ProofUploaded -> Paid, and Pending or
ProofUploaded -> Cancelled. Cancelled is terminal.
"""

import logging
from datetime import datetime
from typing import BinaryIO, Optional

from sqlalchemy import and_, distinct, func, insert, literal, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from intothewild.errors import ErrorCode, WorkflowError
from intothewild.models.registration import (
    Registration, PENDING, PROOF_UPLOADED, PAID, CANCELLED
)
from intothewild.models.trek import TrekEvent
from intothewild.models.user import User
from intothewild.schemas.registration import RegistrationCreate
from intothewild.services import capacity, eligibility, notifications
from intothewild.storage import ObjectStorage, StorageError, store_file

logger = logging.getLogger(__name__)


def get_active_registration(db: Session, user_id: int, trek_id: int) -> Optional[Registration]:
    return db.query(Registration).filter(
        Registration.user_id == user_id,
        Registration.trek_id == trek_id,
        Registration.payment_status != CANCELLED
    ).first()


def _insert_registration(db: Session, user: User, trek: TrekEvent, values: dict) -> Registration:
    """
    Capacity re-check, duplicate check and insert as one statement.

    The trek row is locked first so concurrent writers for the same trek
    queue up (Postgres); SQLite serialises the single write statement itself.
    The partial unique index on active registrations backs the duplicate check.
    """
    if not trek.max_participants:
        raise WorkflowError(ErrorCode.TREK_FULL)

    table = Registration.__table__
    active = and_(Registration.trek_id == trek.id, Registration.payment_status != CANCELLED)
    taken = select(func.count(distinct(Registration.user_id))).where(active).correlate(None).scalar_subquery()
    duplicate = select(Registration.id).where(active, Registration.user_id == user.id).correlate(None).exists()

    source = select(
        *[literal(value, type_=table.c[name].type) for name, value in values.items()]
    ).where(taken < trek.max_participants, ~duplicate)

    try:
        db.query(TrekEvent.id).filter(TrekEvent.id == trek.id).with_for_update().first()
        result = db.execute(insert(table).from_select(list(values), source))
        inserted = result.rowcount
        if inserted:
            db.commit()
        else:
            db.rollback()
    except IntegrityError as e:
        db.rollback()
        logger.info(f"Duplicate registration blocked by index for user {user.id}, trek {trek.id}: {e.orig}")
        raise WorkflowError(ErrorCode.ALREADY_REGISTERED) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Registration insert failed for user {user.id}, trek {trek.id}: {e}")
        raise WorkflowError(ErrorCode.UNKNOWN_STORE_ERROR) from e

    if not inserted:
        # Nothing written: report in gate order, capacity first
        status = capacity.check_capacity(db, trek)
        if not status.has_space:
            raise WorkflowError(ErrorCode.TREK_FULL)
        raise WorkflowError(ErrorCode.ALREADY_REGISTERED)

    return get_active_registration(db, user.id, trek.id)


def register_for_trek(db: Session, user: Optional[User], data: RegistrationCreate) -> Registration:
    """
    Eligibility gate, capacity gate, then the atomic registration write.
    """
    trek = db.query(TrekEvent).filter(TrekEvent.id == data.trek_id).first()

    eligibility.check_eligibility(
        db, user, trek,
        indemnity_accepted=data.indemnity_accepted,
        registrant_name=data.registrant_name,
        registrant_phone=data.registrant_phone,
    )

    if not capacity.check_capacity(db, trek).has_space:
        raise WorkflowError(ErrorCode.TREK_FULL)

    now = datetime.utcnow()
    registration = _insert_registration(db, user, trek, {
        "user_id": user.id,
        "trek_id": trek.id,
        "payment_status": PENDING,
        "booking_datetime": now,
        "indemnity_accepted_at": now,
        "registrant_name": data.registrant_name.strip(),
        "registrant_phone": data.registrant_phone.strip(),
        "is_driver": data.is_driver,
        "offered_seats": data.offered_seats,
    })
    logger.info(f"User {user.id} registered for trek {trek.id} (registration {registration.id})")

    notifications.dispatch_notification(
        db, user.id, "registration_confirmation", {"trek_name": trek.name}, trek_id=trek.id
    )
    return registration


def _load_registration(db: Session, registration_id: int) -> Registration:
    registration = db.query(Registration).filter(Registration.id == registration_id).first()
    if registration is None:
        raise WorkflowError(ErrorCode.REGISTRATION_NOT_FOUND)
    return registration


def upload_payment_proof(
    db: Session,
    storage: ObjectStorage,
    user: User,
    registration_id: int,
    file_obj: Optional[BinaryIO],
    filename: str,
    content_type: str,
    payer_name: Optional[str],
    payer_phone: Optional[str],
) -> Registration:
    registration = _load_registration(db, registration_id)
    if registration.user_id != user.id:
        raise WorkflowError(ErrorCode.FORBIDDEN)
    if registration.payment_status not in (PENDING, PROOF_UPLOADED):
        raise WorkflowError(ErrorCode.INVALID_STATE)
    if not payer_name or not payer_name.strip() or not payer_phone or not payer_phone.strip():
        raise WorkflowError(ErrorCode.MISSING_CONTACT_DETAILS)
    if file_obj is None:
        raise WorkflowError(ErrorCode.INVALID_FILE)

    # Nothing is written to the database until the file is stored
    try:
        path, public_url = store_file(
            storage, "payment-proofs", (user.id, registration.trek_id),
            file_obj, filename, content_type,
        )
    except ValueError as e:
        raise WorkflowError(ErrorCode.INVALID_FILE, detail=str(e)) from e
    except StorageError as e:
        logger.error(f"Payment proof upload failed for registration {registration.id}: {e}")
        raise WorkflowError(ErrorCode.UPLOAD_FAILED) from e

    try:
        registration.payment_proof_url = public_url
        registration.payer_name = payer_name.strip()
        registration.payer_phone = payer_phone.strip()
        registration.proof_uploaded_at = datetime.utcnow()
        registration.payment_status = PROOF_UPLOADED
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Saving payment proof failed for registration {registration_id}: {e}")
        try:
            storage.delete(path)
        except StorageError as cleanup_error:
            logger.error(f"Orphaned payment proof left at {path}: {cleanup_error}")
        raise WorkflowError(ErrorCode.UPDATE_FAILED) from e

    db.refresh(registration)
    notifications.dispatch_notification(
        db, user.id, "payment_proof_received", {"trek_name": registration.trek.name},
        trek_id=registration.trek_id,
    )
    return registration


def verify_payment(db: Session, registration_id: int) -> Registration:
    registration = _load_registration(db, registration_id)
    if registration.payment_status != PROOF_UPLOADED:
        raise WorkflowError(ErrorCode.INVALID_STATE, detail="Only uploaded payment proofs can be verified.")

    try:
        registration.payment_status = PAID
        registration.verified_at = datetime.utcnow()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Payment verification failed for registration {registration_id}: {e}")
        raise WorkflowError(ErrorCode.UPDATE_FAILED) from e

    db.refresh(registration)
    notifications.dispatch_notification(
        db, registration.user_id, "payment_verified", {"trek_name": registration.trek.name},
        trek_id=registration.trek_id,
    )
    return registration


def cancel_registration(db: Session, user: User, registration_id: int) -> Registration:
    """
    Marks the registration Cancelled; its slot is freed because capacity
    counts skip cancelled rows.
    """
    registration = _load_registration(db, registration_id)
    is_admin = user.role == "admin"
    if registration.user_id != user.id and not is_admin:
        raise WorkflowError(ErrorCode.FORBIDDEN)
    if registration.payment_status == CANCELLED:
        raise WorkflowError(ErrorCode.INVALID_STATE, detail="This registration is already cancelled.")
    if registration.payment_status == PAID and not is_admin:
        raise WorkflowError(ErrorCode.INVALID_STATE, detail="Paid registrations can only be cancelled by the organisers.")

    try:
        registration.payment_status = CANCELLED
        registration.cancellation_datetime = datetime.utcnow()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Cancelling registration {registration_id} failed: {e}")
        raise WorkflowError(ErrorCode.UPDATE_FAILED) from e

    db.refresh(registration)
    logger.info(f"Registration {registration.id} cancelled by user {user.id}")
    notifications.dispatch_notification(
        db, registration.user_id, "registration_cancelled", {"trek_name": registration.trek.name},
        trek_id=registration.trek_id,
    )
    return registration
