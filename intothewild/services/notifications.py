# -*- coding: utf-8 -*-
"""
In-app notifications for the registration lifecycle.

Stateless: templates live in a module-level table and the channels are
chosen by the caller. Dispatch is a side effect of an already committed
change, so it never raises; failures are only logged.
"""

import logging
from typing import Iterable, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from intothewild.models.notification import Notification

logger = logging.getLogger(__name__)

DEFAULT_CHANNELS = ("in_app",)

TEMPLATES = {
    "registration_confirmation": (
        "Registered for {trek_name}",
        "You are registered for {trek_name}. Please upload your payment proof to confirm your spot.",
    ),
    "payment_proof_received": (
        "Payment proof received",
        "We received your payment proof for {trek_name}. It will be verified shortly.",
    ),
    "payment_verified": (
        "Payment verified",
        "Your payment for {trek_name} has been verified. See you on the trail!",
    ),
    "registration_cancelled": (
        "Registration cancelled",
        "Your registration for {trek_name} has been cancelled.",
    ),
    "id_proof_reviewed": (
        "ID proof {status}",
        "Your {id_type} proof has been {status}.{notes}",
    ),
    "tent_request_reviewed": (
        "Tent request {status}",
        "Your request for {quantity} x {tent_type} has been {status}.{notes}",
    ),
}


def render(kind: str, context: dict) -> Tuple[str, str]:
    title, message = TEMPLATES[kind]
    return title.format(**context), message.format(**context)


def notes_suffix(notes: Optional[str]) -> str:
    return f" Note: {notes}" if notes else ""


def dispatch_notification(
    db: Session,
    user_id: int,
    kind: str,
    context: dict,
    trek_id: Optional[int] = None,
    channels: Iterable[str] = DEFAULT_CHANNELS,
) -> bool:
    channels = list(channels)
    try:
        title, message = render(kind, context)
    except (KeyError, IndexError) as e:
        logger.error(f"Notification template '{kind}' could not be rendered: {e}")
        return False

    try:
        db.add(Notification(
            user_id=user_id,
            trek_id=trek_id,
            type=kind,
            title=title,
            message=message,
            channels=",".join(channels),
        ))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to store '{kind}' notification for user {user_id}: {e}")
        return False

    for channel in channels:
        if channel != "in_app":
            # TODO: hand email/whatsapp deliveries to a provider once one is chosen
            logger.info(f"Notification '{kind}' for user {user_id} queued on channel {channel}")
    return True
