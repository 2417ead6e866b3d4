from datetime import datetime

import pytest

from intothewild.errors import ErrorCode, WorkflowError
from intothewild.models.registration import Registration, PENDING, CANCELLED
from intothewild.models.tent import TentType, TentInventory, TentRequest
from intothewild.pricing import calculate_gst_price, tent_rental_cost
from intothewild.schemas.tent import TentRequestCreate
from intothewild.services import tents as tent_service


@pytest.fixture
def dome_tent(db):
    tent_type = TentType(name="Dome 2P", capacity=2, rental_price_per_night=100.0)
    db.add(tent_type)
    db.commit()
    db.refresh(tent_type)
    return tent_type


@pytest.fixture
def stock(db, make_trek, dome_tent):
    trek = make_trek()
    inventory = TentInventory(event_id=trek.id, tent_type_id=dome_tent.id, total_available=3, reserved_count=0)
    db.add(inventory)
    db.commit()
    db.refresh(inventory)
    return inventory


def _join(db, user, event_id, status=PENDING):
    db.add(Registration(
        user_id=user.id, trek_id=event_id, payment_status=status,
        booking_datetime=datetime.utcnow(), registrant_name=user.full_name, registrant_phone=user.phone
    ))
    db.commit()


def _request(db, user, inventory, quantity=1, nights=1):
    if db.query(Registration).filter(Registration.user_id == user.id, Registration.trek_id == inventory.event_id).first() is None:
        _join(db, user, inventory.event_id)
    return tent_service.submit_tent_request(db, user, TentRequestCreate(
        event_id=inventory.event_id, tent_type_id=inventory.tent_type_id, quantity=quantity, nights=nights
    ))


def test_gst_pricing():
    assert calculate_gst_price(100) == 118
    assert calculate_gst_price(0) == 0
    assert calculate_gst_price(2499) == 2949
    assert tent_rental_cost(100.0, 2, 3) == 708


def test_request_is_priced_with_gst(db, user, stock):
    tent_request = _request(db, user, stock, quantity=1, nights=1)
    assert tent_request.status == "pending"
    assert tent_request.total_cost == 118


def test_request_beyond_stock_refused(db, user, stock):
    with pytest.raises(WorkflowError) as exc:
        _request(db, user, stock, quantity=4)
    assert exc.value.code == ErrorCode.TENT_UNAVAILABLE


def test_request_for_unstocked_tent_refused(db, user, make_trek, dome_tent):
    trek = make_trek()
    _join(db, user, trek.id)
    with pytest.raises(WorkflowError) as exc:
        tent_service.submit_tent_request(db, user, TentRequestCreate(
            event_id=trek.id, tent_type_id=dome_tent.id, quantity=1
        ))
    assert exc.value.code == ErrorCode.TENT_UNAVAILABLE


def test_resubmitting_updates_the_same_request(db, user, stock):
    first = _request(db, user, stock, quantity=1)
    second = _request(db, user, stock, quantity=2, nights=2)
    assert second.id == first.id
    assert second.quantity_requested == 2
    assert second.total_cost == 472


def test_approval_reserves_inventory(db, user, stock):
    tent_request = _request(db, user, stock, quantity=2)
    approved = tent_service.review_tent_request(db, tent_request, "approve", "Pick up at base camp")

    assert approved.status == "approved"
    db.refresh(stock)
    assert stock.reserved_count == 2
    assert tent_service.available_quantity(stock) == 1


def test_approval_beyond_inventory_is_refused(db, make_user, stock):
    early, late = make_user(), make_user()
    late_request = _request(db, late, stock, quantity=2)
    early_request = _request(db, early, stock, quantity=2)
    tent_service.review_tent_request(db, early_request, "approve")

    with pytest.raises(WorkflowError) as exc:
        tent_service.review_tent_request(db, late_request, "approve")
    assert exc.value.code == ErrorCode.TENT_UNAVAILABLE

    db.refresh(late_request)
    db.refresh(stock)
    assert late_request.status == "pending"
    assert stock.reserved_count == 2


def test_reject_leaves_inventory(db, user, stock):
    tent_request = _request(db, user, stock)
    rejected = tent_service.review_tent_request(db, tent_request, "reject", "Sold out offline")
    assert rejected.status == "rejected"
    assert rejected.admin_notes == "Sold out offline"
    db.refresh(stock)
    assert stock.reserved_count == 0


def test_reviewed_request_cannot_be_reviewed_again(db, user, stock):
    tent_request = _request(db, user, stock)
    tent_service.review_tent_request(db, tent_request, "reject")
    with pytest.raises(WorkflowError) as exc:
        tent_service.review_tent_request(db, tent_request, "approve")
    assert exc.value.code == ErrorCode.INVALID_STATE


def test_approved_request_cannot_be_edited(db, user, stock):
    tent_request = _request(db, user, stock)
    tent_service.review_tent_request(db, tent_request, "approve")
    with pytest.raises(WorkflowError) as exc:
        _request(db, user, stock, quantity=2)
    assert exc.value.code == ErrorCode.INVALID_STATE


def test_guarded_counter_never_goes_negative(db, stock):
    assert not tent_service.update_tent_reserved_count(db, stock.event_id, stock.tent_type_id, -1)
    assert tent_service.update_tent_reserved_count(db, stock.event_id, stock.tent_type_id, 3)
    assert not tent_service.update_tent_reserved_count(db, stock.event_id, stock.tent_type_id, 1)
    db.commit()
    db.refresh(stock)
    assert stock.reserved_count == 3


def test_owner_cancels_pending_request(db, make_user, stock):
    owner = make_user()
    tent_request = _request(db, owner, stock)

    with pytest.raises(WorkflowError) as exc:
        tent_service.cancel_tent_request(db, make_user(), tent_request)
    assert exc.value.code == ErrorCode.FORBIDDEN

    assert tent_service.cancel_tent_request(db, owner, tent_request).status == "cancelled"


def test_unregistered_user_cannot_request_tents(db, user, stock):
    with pytest.raises(WorkflowError) as exc:
        tent_service.submit_tent_request(db, user, TentRequestCreate(
            event_id=stock.event_id, tent_type_id=stock.tent_type_id, quantity=1
        ))
    assert exc.value.code == ErrorCode.FORBIDDEN
    assert db.query(TentRequest).count() == 0


def test_cancelled_registration_cannot_request_tents(db, user, stock):
    _join(db, user, stock.event_id, status=CANCELLED)
    with pytest.raises(WorkflowError) as exc:
        _request(db, user, stock)
    assert exc.value.code == ErrorCode.FORBIDDEN
