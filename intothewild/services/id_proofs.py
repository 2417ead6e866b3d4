# -*- coding: utf-8 -*-
"""
Government ID proofs uploaded by users and reviewed by admins.
"""

import logging
from datetime import datetime
from typing import BinaryIO, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from intothewild.errors import ErrorCode, WorkflowError
from intothewild.models.id_proof import IdType, UserIdProof
from intothewild.models.user import User
from intothewild.services import notifications
from intothewild.storage import ObjectStorage, StorageError, store_file

logger = logging.getLogger(__name__)


def upload_id_proof(
    db: Session,
    storage: ObjectStorage,
    user: User,
    id_type: IdType,
    file_obj: BinaryIO,
    filename: str,
    content_type: str,
) -> UserIdProof:
    """
    Stores the document and leaves a pending proof for review. A pending or
    rejected proof of the same type is replaced; an approved one is kept.
    """
    existing = db.query(UserIdProof).filter(
        UserIdProof.user_id == user.id,
        UserIdProof.id_type_id == id_type.id
    ).order_by(UserIdProof.uploaded_at.desc()).first()
    if existing is not None and existing.verification_status == "approved":
        raise WorkflowError(ErrorCode.INVALID_STATE, detail=f"Your {id_type.name} proof is already approved.")

    try:
        path, public_url = store_file(storage, "id-proofs", (user.id, id_type.id), file_obj, filename, content_type)
    except ValueError as e:
        raise WorkflowError(ErrorCode.INVALID_FILE, detail=str(e)) from e
    except StorageError as e:
        logger.error(f"ID proof upload failed for user {user.id}: {e}")
        raise WorkflowError(ErrorCode.UPLOAD_FAILED) from e

    proof = existing
    if proof is None:
        proof = UserIdProof(user_id=user.id, id_type_id=id_type.id)
        db.add(proof)
    proof.proof_url = public_url
    proof.verification_status = "pending"
    proof.admin_notes = None
    proof.uploaded_at = datetime.utcnow()
    proof.verified_at = None
    proof.verified_by = None

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Saving ID proof for user {user.id} failed: {e}")
        try:
            storage.delete(path)
        except StorageError as cleanup_error:
            logger.error(f"Orphaned ID proof left at {path}: {cleanup_error}")
        raise WorkflowError(ErrorCode.UPDATE_FAILED) from e
    db.refresh(proof)
    return proof


def review_id_proof(db: Session, admin: User, proof: UserIdProof, status: str, admin_notes: Optional[str] = None) -> UserIdProof:
    if proof.verification_status != "pending":
        raise WorkflowError(ErrorCode.INVALID_STATE, detail="This ID proof has already been reviewed.")

    try:
        proof.verification_status = status
        proof.admin_notes = (admin_notes or "").strip() or None
        proof.verified_at = datetime.utcnow()
        proof.verified_by = admin.id
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Reviewing ID proof {proof.id} failed: {e}")
        raise WorkflowError(ErrorCode.UPDATE_FAILED) from e

    db.refresh(proof)
    notifications.dispatch_notification(
        db, proof.user_id, "id_proof_reviewed",
        {"status": status, "id_type": proof.id_type.name, "notes": notifications.notes_suffix(proof.admin_notes)},
    )
    return proof
