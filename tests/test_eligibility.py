import pytest
from sqlalchemy.exc import OperationalError

from intothewild.errors import ErrorCode, WorkflowError
from intothewild.services import eligibility


def _check(db, user, trek, **overrides):
    values = {
        "indemnity_accepted": True,
        "registrant_name": "Asha Rao",
        "registrant_phone": "9845000001",
    }
    values.update(overrides)
    eligibility.check_eligibility(db, user, trek, **values)


def test_anonymous_user_is_refused_first(db, make_trek):
    trek = make_trek()
    with pytest.raises(WorkflowError) as exc:
        _check(db, None, trek, indemnity_accepted=False, registrant_name="")
    assert exc.value.code == ErrorCode.AUTH_REQUIRED


def test_indemnity_checked_before_contact_details(db, user, make_trek):
    with pytest.raises(WorkflowError) as exc:
        _check(db, user, make_trek(), indemnity_accepted=False, registrant_phone=None)
    assert exc.value.code == ErrorCode.INDEMNITY_REQUIRED


@pytest.mark.parametrize("name, phone", [("", "9845000001"), ("Asha", "   "), (None, None)])
def test_blank_contact_details(db, user, make_trek, name, phone):
    with pytest.raises(WorkflowError) as exc:
        _check(db, user, make_trek(), registrant_name=name, registrant_phone=phone)
    assert exc.value.code == ErrorCode.MISSING_CONTACT_DETAILS


def test_missing_trek(db, user):
    with pytest.raises(WorkflowError) as exc:
        _check(db, user, None)
    assert exc.value.code == ErrorCode.TREK_NOT_LOADED


def test_trek_without_id_requirement_passes(db, user, make_trek):
    _check(db, user, make_trek(government_id_required=False))


def test_missing_required_ids_are_named(db, user, make_trek, make_id_type, require_ids, give_proof):
    aadhaar = make_id_type("Aadhaar")
    pan = make_id_type("PAN")
    trek = make_trek(government_id_required=True)
    require_ids(trek, aadhaar, pan)
    give_proof(user, aadhaar)

    with pytest.raises(WorkflowError) as exc:
        _check(db, user, trek)
    assert exc.value.code == ErrorCode.MISSING_APPROVED_ID
    assert exc.value.missing == ["PAN"]
    assert "PAN" in exc.value.message

    give_proof(user, pan)
    _check(db, user, trek)


def test_pending_or_rejected_proofs_do_not_count(db, user, make_trek, make_id_type, require_ids, give_proof):
    passport = make_id_type("Passport")
    trek = make_trek(government_id_required=True)
    require_ids(trek, passport)
    give_proof(user, passport, status="pending")

    with pytest.raises(WorkflowError) as exc:
        _check(db, user, trek)
    assert exc.value.missing == ["Passport"]


def test_flag_without_configured_types_needs_any_approved_proof(db, user, make_trek, make_id_type, give_proof):
    trek = make_trek(government_id_required=True)
    with pytest.raises(WorkflowError) as exc:
        _check(db, user, trek)
    assert exc.value.code == ErrorCode.MISSING_APPROVED_ID

    give_proof(user, make_id_type("Driving Licence"))
    _check(db, user, trek)


def test_requirement_lookup_failure_fails_closed(db, user, make_trek, monkeypatch):
    trek = make_trek(government_id_required=True)

    def broken_lookup(db, trek_id):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(eligibility, "required_id_types", broken_lookup)
    with pytest.raises(WorkflowError) as exc:
        _check(db, user, trek)
    assert exc.value.code == ErrorCode.REQUIREMENT_CHECK_FAILED
