import bcrypt
import pytest

from shopledger.errors import ConflictError, NotFound, ValidationError
from shopledger.services import ledger_service, staff_service


def test_passcode_is_stored_hashed(shop, cashier):
    assert cashier.passcode_hash != "129"
    assert bcrypt.checkpw(b"129", cashier.passcode_hash.encode("utf-8"))
    assert "passcode_hash" not in cashier.to_dict()
    assert "passcode" not in cashier.to_dict()


def test_lookup_by_passcode(shop, cashier, helper):
    assert staff_service.find_by_passcode(shop.id, "129").id == cashier.id
    assert staff_service.find_by_passcode(shop.id, 4821).id == helper.id


@pytest.mark.parametrize("code", ["000", "12", "12a", "", None, "123456789"])
def test_lookup_misses_are_not_found(shop, cashier, code):
    with pytest.raises(NotFound):
        staff_service.find_by_passcode(shop.id, code)


def test_lookup_ignores_inactive_staff(shop, cashier):
    staff_service.deactivate_staff(shop.id, cashier.id)

    with pytest.raises(NotFound):
        staff_service.find_by_passcode(shop.id, "129")


def test_lookup_is_scoped_to_shop(shop, other_shop, cashier):
    with pytest.raises(NotFound):
        staff_service.find_by_passcode(other_shop.id, "129")


def test_active_passcodes_are_unique(shop, cashier):
    with pytest.raises(ConflictError):
        staff_service.upsert_staff(shop.id, {"name": "Copycat", "passcode": "129"})


def test_passcode_reusable_after_deactivation(shop, cashier):
    staff_service.deactivate_staff(shop.id, cashier.id)

    member = staff_service.upsert_staff(shop.id, {"name": "Successor", "passcode": "129"})

    assert staff_service.find_by_passcode(shop.id, "129").id == member.id


def test_same_passcode_allowed_in_another_shop(shop, other_shop, cashier):
    member = staff_service.upsert_staff(other_shop.id, {"name": "Twin", "passcode": "129"})
    assert member.shop_id == other_shop.id


@pytest.mark.parametrize("code", ["12", "123456789", "12-3", "１２３", True])
def test_invalid_passcodes_are_rejected(shop, code):
    with pytest.raises(ValidationError):
        staff_service.upsert_staff(shop.id, {"name": "New", "passcode": code})


def test_change_passcode(shop, cashier, helper):
    staff_service.upsert_staff(shop.id, {"id": cashier.id, "passcode": "3333"})

    assert staff_service.find_by_passcode(shop.id, "3333").id == cashier.id
    with pytest.raises(NotFound):
        staff_service.find_by_passcode(shop.id, "129")

    with pytest.raises(ConflictError):
        staff_service.upsert_staff(shop.id, {"id": cashier.id, "passcode": "4821"})


def test_reactivation_requires_passcode(shop, cashier):
    staff_service.deactivate_staff(shop.id, cashier.id)

    with pytest.raises(ValidationError):
        staff_service.upsert_staff(shop.id, {"id": cashier.id, "is_active": True})

    member = staff_service.upsert_staff(
        shop.id, {"id": cashier.id, "is_active": True, "passcode": "129"}
    )
    assert member.is_active is True


def test_list_staff_orders_by_name(shop, helper, cashier):
    staff_service.deactivate_staff(shop.id, helper.id)

    assert [m.name for m in staff_service.list_staff(shop.id)] == ["Asha", "Ravi"]
    assert [m.name for m in staff_service.list_active_staff(shop.id)] == ["Asha"]


def test_delete_staff_without_history(shop, helper):
    staff_service.delete_staff(shop.id, helper.id)

    with pytest.raises(NotFound):
        staff_service.get_staff(shop.id, helper.id)


def test_delete_staff_with_history_conflicts(shop, cashier):
    ledger_service.record_sale(shop.id, "10.00", cashier.id, "CASH")

    with pytest.raises(ConflictError):
        staff_service.delete_staff(shop.id, cashier.id)
