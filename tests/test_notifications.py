from sqlalchemy.exc import OperationalError

from intothewild.models.notification import Notification
from intothewild.models.registration import Registration, PENDING
from intothewild.schemas.registration import RegistrationCreate
from intothewild.services import notifications
from intothewild.services import registration as registration_service


def test_render_fills_template():
    title, message = notifications.render("registration_confirmation", {"trek_name": "Kudremukh Peak"})
    assert title == "Registered for Kudremukh Peak"
    assert "Kudremukh Peak" in message


def test_notes_suffix():
    assert notifications.notes_suffix(None) == ""
    assert notifications.notes_suffix("Bring the original") == " Note: Bring the original"


def test_dispatch_stores_in_app_notification(db, user):
    sent = notifications.dispatch_notification(
        db, user.id, "payment_verified", {"trek_name": "Skandagiri"}, channels=("in_app", "email")
    )
    assert sent
    notification = db.query(Notification).one()
    assert notification.user_id == user.id
    assert notification.channels == "in_app,email"
    assert notification.is_read is False


def test_unknown_template_is_not_raised(db, user):
    assert not notifications.dispatch_notification(db, user.id, "no_such_template", {})
    assert not notifications.dispatch_notification(db, user.id, "payment_verified", {})
    assert db.query(Notification).count() == 0


def test_store_failure_is_not_raised(db, user, monkeypatch):
    def failing_commit():
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", failing_commit)
    assert not notifications.dispatch_notification(db, user.id, "payment_verified", {"trek_name": "Savandurga"})


def test_failing_notification_keeps_registration(db, user, make_trek, monkeypatch):
    trek = make_trek()
    monkeypatch.setitem(notifications.TEMPLATES, "registration_confirmation", ("{missing}", "{missing}"))

    registration = registration_service.register_for_trek(db, user, RegistrationCreate(
        trek_id=trek.id, indemnity_accepted=True, registrant_name="Asha Rao", registrant_phone="9845000001"
    ))

    assert registration.payment_status == PENDING
    assert db.query(Registration).filter(Registration.user_id == user.id).count() == 1
    assert db.query(Notification).count() == 0
