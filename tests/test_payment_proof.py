import io

import pytest
from PIL import Image
from sqlalchemy.exc import OperationalError

from intothewild.errors import ErrorCode, WorkflowError
from intothewild.models.registration import PENDING, PROOF_UPLOADED, CANCELLED
from intothewild.schemas.registration import RegistrationCreate
from intothewild.services import registration as registration_service

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\n%%EOF\n"


def _png_bytes():
    buffer = io.BytesIO()
    Image.new("RGBA", (2400, 1200), (30, 120, 60, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def registration(db, user, make_trek):
    trek = make_trek()
    return registration_service.register_for_trek(db, user, RegistrationCreate(
        trek_id=trek.id, indemnity_accepted=True, registrant_name="Asha Rao", registrant_phone="9845000001"
    ))


def _upload(db, storage, user, registration, data=PDF_BYTES, content_type="application/pdf", **kwargs):
    values = {"payer_name": "Asha Rao", "payer_phone": "9845000001"}
    values.update(kwargs)
    return registration_service.upload_payment_proof(
        db, storage, user, registration.id, io.BytesIO(data), "upi receipt.pdf", content_type,
        values["payer_name"], values["payer_phone"],
    )


def test_upload_moves_to_proof_uploaded(db, storage, user, registration):
    updated = _upload(db, storage, user, registration)

    assert updated.id == registration.id
    assert updated.payment_status == PROOF_UPLOADED
    assert updated.payer_name == "Asha Rao"
    assert updated.proof_uploaded_at is not None
    path = updated.payment_proof_url.replace("https://files.test/", "")
    assert path.startswith(f"payment-proofs/{user.id}/{registration.trek_id}/")
    assert path.endswith("_upi_receipt.pdf")
    assert storage.objects[path] == (PDF_BYTES, "application/pdf")


def test_reupload_replaces_reference_on_same_row(db, storage, user, registration):
    first = _upload(db, storage, user, registration).payment_proof_url
    second = _upload(db, storage, user, registration, data=_png_bytes(), content_type="image/png")

    assert second.id == registration.id
    assert second.payment_status == PROOF_UPLOADED
    assert second.payment_proof_url != first
    assert second.payment_proof_url.endswith(".jpg")


def test_images_are_stored_as_bounded_jpegs(db, storage, user, registration):
    updated = _upload(db, storage, user, registration, data=_png_bytes(), content_type="image/png")
    path = updated.payment_proof_url.replace("https://files.test/", "")
    data, content_type = storage.objects[path]

    assert content_type == "image/jpeg"
    image = Image.open(io.BytesIO(data))
    assert image.format == "JPEG"
    assert max(image.size) <= 1600


def test_upload_failure_leaves_registration_untouched(db, failing_storage, user, registration):
    with pytest.raises(WorkflowError) as exc:
        _upload(db, failing_storage, user, registration)
    assert exc.value.code == ErrorCode.UPLOAD_FAILED

    db.refresh(registration)
    assert registration.payment_status == PENDING
    assert registration.payment_proof_url is None
    assert registration.payer_name is None


def test_database_failure_cleans_up_stored_file(db, storage, user, registration, monkeypatch):
    def failing_commit():
        raise OperationalError("UPDATE", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "commit", failing_commit)
    with pytest.raises(WorkflowError) as exc:
        _upload(db, storage, user, registration)
    assert exc.value.code == ErrorCode.UPDATE_FAILED
    assert storage.objects == {}
    assert len(storage.deleted) == 1


def test_payer_details_required(db, storage, user, registration):
    with pytest.raises(WorkflowError) as exc:
        _upload(db, storage, user, registration, payer_phone="  ")
    assert exc.value.code == ErrorCode.MISSING_CONTACT_DETAILS
    assert storage.objects == {}


def test_empty_or_unsupported_files_rejected(db, storage, user, registration):
    with pytest.raises(WorkflowError) as exc:
        _upload(db, storage, user, registration, data=b"")
    assert exc.value.code == ErrorCode.INVALID_FILE

    with pytest.raises(WorkflowError) as exc:
        _upload(db, storage, user, registration, data=b"hello", content_type="text/plain")
    assert exc.value.code == ErrorCode.INVALID_FILE

    with pytest.raises(WorkflowError) as exc:
        _upload(db, storage, user, registration, data=b"not an image", content_type="image/png")
    assert exc.value.code == ErrorCode.INVALID_FILE


def test_only_owner_uploads(db, storage, make_user, registration):
    with pytest.raises(WorkflowError) as exc:
        _upload(db, storage, make_user(), registration)
    assert exc.value.code == ErrorCode.FORBIDDEN


def test_cancelled_registration_refuses_proof(db, storage, user, registration):
    registration_service.cancel_registration(db, user, registration.id)
    with pytest.raises(WorkflowError) as exc:
        _upload(db, storage, user, registration)
    assert exc.value.code == ErrorCode.INVALID_STATE
    db.refresh(registration)
    assert registration.payment_status == CANCELLED
