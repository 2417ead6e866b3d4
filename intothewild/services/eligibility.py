# -*- coding: utf-8 -*-
"""
Eligibility gate run before a registration is written.

Checks run in a fixed order and stop at the first failure:
authentication, indemnity, contact details, trek presence and, when the
trek asks for government ID, approved proofs for every required ID type.
"""

import logging
from typing import Dict, Optional, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from intothewild.errors import ErrorCode, WorkflowError
from intothewild.models.id_proof import IdType, TrekRequiredIdType, UserIdProof
from intothewild.models.trek import TrekEvent
from intothewild.models.user import User

logger = logging.getLogger(__name__)

GENERIC_ID_LABEL = "Government ID"


def required_id_types(db: Session, trek_id: int) -> Dict[int, str]:
    rows = db.query(IdType.id, IdType.name).join(
        TrekRequiredIdType, TrekRequiredIdType.id_type_id == IdType.id
    ).filter(TrekRequiredIdType.trek_id == trek_id).all()
    return {id_type_id: name for id_type_id, name in rows}


def approved_id_type_ids(db: Session, user_id: int) -> Set[int]:
    rows = db.query(UserIdProof.id_type_id).filter(
        UserIdProof.user_id == user_id,
        UserIdProof.verification_status == "approved"
    ).all()
    return {row.id_type_id for row in rows}


def _is_blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def check_eligibility(
    db: Session,
    user: Optional[User],
    trek: Optional[TrekEvent],
    indemnity_accepted: bool,
    registrant_name: Optional[str],
    registrant_phone: Optional[str],
) -> None:
    """
    Raises ``WorkflowError`` with the first failing check; returns None when
    the user may register.
    """
    if user is None:
        raise WorkflowError(ErrorCode.AUTH_REQUIRED)

    if not indemnity_accepted:
        raise WorkflowError(ErrorCode.INDEMNITY_REQUIRED)

    if _is_blank(registrant_name) or _is_blank(registrant_phone):
        raise WorkflowError(ErrorCode.MISSING_CONTACT_DETAILS)

    if trek is None:
        raise WorkflowError(ErrorCode.TREK_NOT_LOADED)

    if not trek.government_id_required:
        return

    try:
        required = required_id_types(db, trek.id)
        approved = approved_id_type_ids(db, user.id)
    except SQLAlchemyError as e:
        logger.error(f"ID requirement lookup failed for trek {trek.id}, user {user.id}: {e}")
        raise WorkflowError(ErrorCode.REQUIREMENT_CHECK_FAILED) from e

    # Flag without specific types: any approved ID proof will do
    if not required:
        if not approved:
            raise WorkflowError(ErrorCode.MISSING_APPROVED_ID, missing=[GENERIC_ID_LABEL])
        return

    missing = sorted(name for id_type_id, name in required.items() if id_type_id not in approved)
    if missing:
        raise WorkflowError(ErrorCode.MISSING_APPROVED_ID, missing=missing)
