# -*- coding: utf-8 -*-
"""
Capacity gate: how many distinct users hold an active registration on a trek.

Cancelled registrations are left out of every count, which is what releases
their slot. Nothing is cached; each check reads the store again.
"""

import logging
from typing import Dict, Iterable, NamedTuple, Optional

from sqlalchemy import distinct, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from intothewild.errors import ErrorCode, WorkflowError
from intothewild.models.registration import Registration, CANCELLED
from intothewild.models.trek import TrekEvent

logger = logging.getLogger(__name__)


class CapacityStatus(NamedTuple):
    trek_id: int
    participant_count: int
    max_participants: Optional[int]
    spots_left: int
    has_space: bool


def has_space(max_participants: Optional[int], participant_count: int) -> bool:
    # Unset or zero maximum means zero capacity
    if not max_participants:
        return False
    return participant_count < max_participants


def count_active_participants(db: Session, trek_id: int) -> int:
    count = db.query(func.count(distinct(Registration.user_id))).filter(
        Registration.trek_id == trek_id,
        Registration.payment_status != CANCELLED
    ).scalar()
    return count or 0


def count_active_participants_by_trek(db: Session, trek_ids: Iterable[int]) -> Dict[int, int]:
    trek_ids = list(trek_ids)
    if not trek_ids:
        return {}
    rows = db.query(Registration.trek_id, func.count(distinct(Registration.user_id))).filter(
        Registration.trek_id.in_(trek_ids),
        Registration.payment_status != CANCELLED
    ).group_by(Registration.trek_id).all()
    return {trek_id: count for trek_id, count in rows}


def capacity_status(trek: TrekEvent, participant_count: int) -> CapacityStatus:
    spots_left = max(0, (trek.max_participants or 0) - participant_count)
    return CapacityStatus(
        trek_id=trek.id,
        participant_count=participant_count,
        max_participants=trek.max_participants,
        spots_left=spots_left,
        has_space=has_space(trek.max_participants, participant_count),
    )


def check_capacity(db: Session, trek: TrekEvent) -> CapacityStatus:
    try:
        count = count_active_participants(db, trek.id)
    except SQLAlchemyError as e:
        logger.error(f"Capacity read failed for trek {trek.id}: {e}")
        raise WorkflowError(ErrorCode.UNKNOWN_STORE_ERROR) from e
    return capacity_status(trek, count)
