# -*- coding: utf-8 -*-
"""
Tent rentals: requests against per-event inventory, approved by admins.
"""

import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from intothewild.errors import ErrorCode, WorkflowError
from intothewild.models.tent import TentInventory, TentRequest
from intothewild.models.user import User
from intothewild.pricing import tent_rental_cost
from intothewild.schemas.tent import TentRequestCreate
from intothewild.services import notifications
from intothewild.services.registration import get_active_registration

logger = logging.getLogger(__name__)


def available_quantity(inventory: TentInventory) -> int:
    return max(0, inventory.total_available - inventory.reserved_count)


def update_tent_reserved_count(db: Session, event_id: int, tent_type_id: int, quantity_change: int) -> bool:
    """
    Guarded increment of ``reserved_count``; never goes below zero or above
    ``total_available``. Runs in the caller's transaction and returns False
    when the guard rejects the change.
    """
    new_count = TentInventory.reserved_count + quantity_change
    result = db.execute(
        update(TentInventory.__table__)
        .where(
            TentInventory.event_id == event_id,
            TentInventory.tent_type_id == tent_type_id,
            new_count >= 0,
            new_count <= TentInventory.total_available,
        )
        .values(reserved_count=new_count)
    )
    return result.rowcount == 1


def submit_tent_request(db: Session, user: User, data: TentRequestCreate) -> TentRequest:
    if get_active_registration(db, user.id, data.event_id) is None:
        raise WorkflowError(ErrorCode.FORBIDDEN, detail="You must be registered for this event to request tent rentals.")

    inventory = db.query(TentInventory).filter(
        TentInventory.event_id == data.event_id,
        TentInventory.tent_type_id == data.tent_type_id
    ).first()
    if inventory is None:
        raise WorkflowError(ErrorCode.TENT_UNAVAILABLE, detail="This tent type is not offered for this event.")
    if data.quantity > available_quantity(inventory):
        raise WorkflowError(ErrorCode.TENT_UNAVAILABLE)

    tent_request = db.query(TentRequest).filter(
        TentRequest.event_id == data.event_id,
        TentRequest.user_id == user.id,
        TentRequest.tent_type_id == data.tent_type_id
    ).first()
    if tent_request is not None and tent_request.status == "approved":
        raise WorkflowError(ErrorCode.INVALID_STATE, detail="An approved tent request cannot be changed.")
    if tent_request is None:
        tent_request = TentRequest(event_id=data.event_id, user_id=user.id, tent_type_id=data.tent_type_id)
        db.add(tent_request)

    tent_request.quantity_requested = data.quantity
    tent_request.nights = data.nights
    tent_request.total_cost = tent_rental_cost(inventory.tent_type.rental_price_per_night, data.quantity, data.nights)
    tent_request.request_notes = data.notes or None
    tent_request.status = "pending"
    tent_request.admin_notes = None

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Tent request for user {user.id}, event {data.event_id} failed: {e}")
        raise WorkflowError(ErrorCode.UPDATE_FAILED) from e
    db.refresh(tent_request)
    return tent_request


def cancel_tent_request(db: Session, user: User, tent_request: TentRequest) -> TentRequest:
    if tent_request.user_id != user.id:
        raise WorkflowError(ErrorCode.FORBIDDEN, detail="You can only cancel your own tent requests.")
    if tent_request.status != "pending":
        raise WorkflowError(ErrorCode.INVALID_STATE, detail="Only pending tent requests can be cancelled.")

    try:
        tent_request.status = "cancelled"
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Cancelling tent request {tent_request.id} failed: {e}")
        raise WorkflowError(ErrorCode.UPDATE_FAILED) from e
    db.refresh(tent_request)
    return tent_request


def review_tent_request(db: Session, tent_request: TentRequest, action: str, admin_notes: Optional[str] = None) -> TentRequest:
    """
    Approval and the inventory reservation commit together or not at all.
    """
    if tent_request.status != "pending":
        raise WorkflowError(ErrorCode.INVALID_STATE, detail="This tent request has already been processed.")

    try:
        if action == "approve":
            reserved = update_tent_reserved_count(
                db, tent_request.event_id, tent_request.tent_type_id, tent_request.quantity_requested
            )
            if not reserved:
                db.rollback()
                raise WorkflowError(ErrorCode.TENT_UNAVAILABLE)
            tent_request.status = "approved"
        else:
            tent_request.status = "rejected"
        tent_request.admin_notes = (admin_notes or "").strip() or None
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Processing tent request {tent_request.id} failed: {e}")
        raise WorkflowError(ErrorCode.UPDATE_FAILED) from e

    db.refresh(tent_request)
    notifications.dispatch_notification(
        db, tent_request.user_id, "tent_request_reviewed",
        {
            "status": tent_request.status,
            "quantity": tent_request.quantity_requested,
            "tent_type": tent_request.tent_type.name,
            "notes": notifications.notes_suffix(tent_request.admin_notes),
        },
        trek_id=tent_request.event_id,
    )
    return tent_request
