# -*- coding: utf-8 -*-
"""
Government ID proof routes: ID types, user uploads and admin review.
"""

from typing import List
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session, joinedload

from intothewild import auth
from intothewild.database import get_db
from intothewild.models.id_proof import IdType, UserIdProof
from intothewild.models.user import User
from intothewild.schemas.id_proof import IdTypeCreate, IdTypeRead, IdProofRead, IdProofReview
from intothewild.services import id_proofs as id_proof_service
from intothewild.storage import ObjectStorage, get_storage

router = APIRouter(
    tags=["ID Proofs"],
)

@router.get("/types", response_model=List[IdTypeRead])
def read_id_types(db: Session = Depends(get_db)):
    return db.query(IdType).order_by(IdType.name).all()

@router.post("/types", response_model=IdTypeRead, status_code=status.HTTP_201_CREATED, dependencies=[Depends(auth.get_admin_user)])
def create_id_type(id_type: IdTypeCreate, db: Session = Depends(get_db)):
    if db.query(IdType).filter(IdType.name == id_type.name).first():
        raise HTTPException(status_code=400, detail="ID type already exists")
    db_id_type = IdType(**id_type.model_dump())
    db.add(db_id_type)
    db.commit()
    db.refresh(db_id_type)
    return db_id_type

@router.post("", response_model=IdProofRead, status_code=status.HTTP_201_CREATED)
def upload_id_proof(
    id_type_id: int = Form(...),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    current_user: User = Depends(auth.get_current_active_user)
):
    id_type = db.query(IdType).filter(IdType.id == id_type_id).first()
    if id_type is None:
        raise HTTPException(status_code=404, detail="ID type not found")
    return id_proof_service.upload_id_proof(
        db, storage, current_user, id_type, file.file, file.filename, file.content_type
    )

@router.get("/me", response_model=List[IdProofRead])
def read_my_id_proofs(
    db: Session = Depends(get_db),
    current_user: User = Depends(auth.get_current_active_user)
):
    return db.query(UserIdProof).options(joinedload(UserIdProof.id_type)).filter(
        UserIdProof.user_id == current_user.id
    ).order_by(UserIdProof.uploaded_at.desc()).all()

@router.get("/pending", response_model=List[IdProofRead], dependencies=[Depends(auth.get_admin_user)])
def read_pending_id_proofs(db: Session = Depends(get_db)):
    return db.query(UserIdProof).options(joinedload(UserIdProof.id_type)).filter(
        UserIdProof.verification_status == "pending"
    ).order_by(UserIdProof.uploaded_at).all()

@router.post("/{proof_id}/review", response_model=IdProofRead)
def review_id_proof(
    proof_id: int,
    review: IdProofReview,
    db: Session = Depends(get_db),
    admin: User = Depends(auth.get_admin_user)
):
    proof = db.query(UserIdProof).filter(UserIdProof.id == proof_id).first()
    if proof is None:
        raise HTTPException(status_code=404, detail="ID proof not found")
    return id_proof_service.review_id_proof(db, admin, proof, review.status, review.admin_notes)
