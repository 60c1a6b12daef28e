import uuid

import pytest

from cashflow_tracker.exceptions import ValidationError
from cashflow_tracker.models import CashFlow, CashFlowDraft, CashFlowType, db
from cashflow_tracker.repository import CashFlowRepository


def _count_rows():
    return db.session.execute(db.select(db.func.count()).select_from(CashFlow)).scalar_one()


def test_create_then_get_round_trip(service, alice):
    created = service.create(alice, CashFlowType.CASH_IN, "Employer", "Salary", 5000000, "October pay")

    fetched = service.get_by_id(alice, created.id)

    assert fetched is not None
    assert uuid.UUID(fetched.id)
    assert (fetched.type, fetched.source, fetched.label, fetched.amount, fetched.description) == (
        "CASH_IN",
        "Employer",
        "Salary",
        5000000,
        "October pay",
    )
    assert fetched.user_id == alice


def test_create_accepts_form_strings(service, alice):
    created = service.create(alice, "cash_out", "  Market ", " Groceries ", " 125000 ", "   ")

    assert created.type == "CASH_OUT"
    assert created.source == "Market"
    assert created.label == "Groceries"
    assert created.amount == 125000
    assert created.description is None


@pytest.mark.parametrize("amount", [0, -1, "0", "-50", None, "", "12.5", "abc", True, 10.0])
def test_create_rejects_invalid_amount(service, alice, amount):
    with pytest.raises(ValidationError):
        service.create(alice, "CASH_IN", "Employer", "Salary", amount)
    assert _count_rows() == 0


def test_create_rejects_unknown_type(service, alice):
    with pytest.raises(ValidationError) as excinfo:
        service.create(alice, "TRANSFER", "Bank", "Move", 100)
    assert "Type must be CASH_IN or CASH_OUT." in excinfo.value.details["errors"]
    assert _count_rows() == 0


def test_validation_collects_every_error(service, alice):
    with pytest.raises(ValidationError) as excinfo:
        service.create(alice, "", "Bank", "Move", -5)
    assert excinfo.value.details["errors"] == ["Type is required.", "Amount must be greater than zero."]


@pytest.mark.parametrize("amount", [2**63, str(2**63), "9" * 25])
def test_create_rejects_amount_beyond_64_bits(service, alice, amount):
    with pytest.raises(ValidationError) as excinfo:
        service.create(alice, "CASH_IN", "Employer", "Salary", amount)
    assert excinfo.value.details["errors"] == ["Amount is too large."]
    assert _count_rows() == 0

    created = service.create(alice, "CASH_IN", "Employer", "Salary", 2**63 - 1)
    assert service.get_by_id(alice, created.id).amount == 2**63 - 1


def test_create_rejects_non_text_fields(service, alice):
    with pytest.raises(ValidationError) as excinfo:
        service.create(alice, 5, 7, ["a"], 100, {"note": 1})
    assert excinfo.value.details["errors"] == [
        "Type must be CASH_IN or CASH_OUT.",
        "Source must be text.",
        "Label must be text.",
        "Description must be text.",
    ]
    assert _count_rows() == 0


def test_failed_commit_leaves_session_usable(service, alice):
    draft = CashFlowDraft(type=CashFlowType.CASH_IN, source="Employer", label="Salary", amount=2**64)

    with pytest.raises(OverflowError):
        CashFlowRepository().add(alice, draft)

    created = service.create(alice, "CASH_IN", "Employer", "Salary", 5)
    assert [cf.id for cf in service.list(alice)] == [created.id]


def test_list_is_scoped_to_owner(service, alice, bob):
    mine = service.create(alice, "CASH_IN", "Employer", "Salary", 100)
    theirs = service.create(bob, "CASH_OUT", "Shop", "Shoes", 40)

    assert {cf.id for cf in service.list(alice)} == {mine.id}
    assert {cf.id for cf in service.list(bob)} == {theirs.id}
    assert service.list(alice, "shoes") == []


def test_search_is_case_insensitive_substring(service, alice):
    salary = service.create(alice, "CASH_IN", "Employer", "Salary", 100)
    service.create(alice, "CASH_OUT", "Market", "Groceries", 30)

    assert [cf.id for cf in service.list(alice, "sal")] == [salary.id]


def test_search_matches_source_and_description(service, alice):
    by_source = service.create(alice, "CASH_OUT", "Pharmacy", "Vitamins", 10)
    by_note = service.create(alice, "CASH_OUT", "Market", "Lunch", 20, "with the TEAM")
    service.create(alice, "CASH_IN", "Employer", "Salary", 100)

    assert {cf.id for cf in service.list(alice, "pharm")} == {by_source.id}
    assert {cf.id for cf in service.list(alice, "team")} == {by_note.id}


def test_blank_search_lists_everything(service, alice):
    service.create(alice, "CASH_IN", "Employer", "Salary", 100)
    service.create(alice, "CASH_OUT", "Market", "Groceries", 30)

    assert len(service.list(alice, "   ")) == 2


def test_search_wildcards_are_literal(service, alice):
    service.create(alice, "CASH_IN", "Employer", "Salary", 100)
    discount = service.create(alice, "CASH_OUT", "Shop", "50% off", 30)

    assert [cf.id for cf in service.list(alice, "%")] == [discount.id]
    assert service.list(alice, "_") == []


def test_get_by_id_hides_foreign_and_missing(service, alice, bob):
    theirs = service.create(bob, "CASH_IN", "Employer", "Salary", 100)

    assert service.get_by_id(alice, theirs.id) is None
    assert service.get_by_id(alice, str(uuid.uuid4())) is None
    assert service.get_by_id(alice, "not-a-uuid") is None


def test_update_replaces_all_fields(service, alice):
    created = service.create(alice, "CASH_IN", "Employer", "Salary", 100, "note")

    updated = service.update(alice, created.id, "CASH_OUT", "Market", "Groceries", 250, None)

    assert updated is not None
    assert updated.id == created.id
    fetched = service.get_by_id(alice, created.id)
    assert (fetched.type, fetched.source, fetched.label, fetched.amount, fetched.description) == (
        "CASH_OUT",
        "Market",
        "Groceries",
        250,
        None,
    )


def test_update_foreign_record_is_not_found(service, alice, bob):
    theirs = service.create(bob, "CASH_IN", "Employer", "Salary", 100)

    assert service.update(alice, theirs.id, "CASH_OUT", "x", "y", 1) is None
    assert service.update(alice, str(uuid.uuid4()), "CASH_OUT", "x", "y", 1) is None
    assert service.get_by_id(bob, theirs.id).amount == 100


def test_update_rejects_invalid_amount_without_change(service, alice):
    created = service.create(alice, "CASH_IN", "Employer", "Salary", 100)

    with pytest.raises(ValidationError):
        service.update(alice, created.id, "CASH_IN", "Employer", "Salary", 0)

    assert service.get_by_id(alice, created.id).amount == 100


def test_delete_is_idempotent(service, alice):
    created = service.create(alice, "CASH_IN", "Employer", "Salary", 100)

    assert service.delete(alice, created.id) is True
    assert service.delete(alice, created.id) is False
    assert service.get_by_id(alice, created.id) is None


def test_delete_foreign_record_is_not_found(service, alice, bob):
    theirs = service.create(bob, "CASH_IN", "Employer", "Salary", 100)

    assert service.delete(alice, theirs.id) is False
    assert service.get_by_id(bob, theirs.id) is not None


def test_create_logs_without_amounts(service, alice, caplog):
    with caplog.at_level("INFO", logger="cashflow_tracker.service"):
        created = service.create(alice, "CASH_IN", "Employer", "Salary", 987654)
    assert f"Created cash flow {created.id}" in caplog.text
    assert "987654" not in caplog.text


def test_not_found_logs_normalized_id_at_debug(service, alice, caplog):
    raw = "6F9619FF-8B86-D011-B42D-00C04FC964FF"

    with caplog.at_level("DEBUG", logger="cashflow_tracker.service"):
        assert service.delete(alice, raw) is False
        assert service.update(alice, "<script>", "CASH_IN", "x", "y", 1) is None

    records = [r for r in caplog.records if "not found" in r.getMessage()]
    assert [r.levelname for r in records] == ["DEBUG", "DEBUG"]
    assert raw.lower() in records[0].getMessage()
    assert raw not in caplog.text
    assert "<script>" not in caplog.text
