from __future__ import annotations

from src.spendbook.ledger.errors import LedgerErrorCode
from src.spendbook.ledger.models import ExpenseDraft
from src.spendbook.ledger.repository import LedgerRepository
from src.spendbook.ledger.store import EXPENSES, MemoryStore


def _draft(**kw) -> ExpenseDraft:
    base = {"amount": "10", "date": "2024-05-01", "category_id": "c1", "description": "Coffee", "notes": ""}
    base.update(kw)
    return ExpenseDraft(**base)


def test_add_expense_to_empty_store(ledger: LedgerRepository) -> None:
    res = ledger.add_expense(_draft(amount="12.50", description="Coffee"))
    assert res.ok
    expenses = ledger.get_expenses()
    assert len(expenses) == 1
    assert expenses[0].amount == 12.5
    assert expenses[0].description == "Coffee"
    assert expenses[0].id and expenses[0].id.startswith("_")


def test_added_expense_round_trips_by_id(ledger: LedgerRepository) -> None:
    created = ledger.add_expense(_draft(amount=7.25, description="  Bus  ", notes=" late ")).value
    assert created.description == "Bus"
    assert created.notes == "late"
    assert created.created_at.endswith("Z")

    ledger.add_expense(_draft(description="Other"))
    fetched = ledger.get_expense_by_id(created.id)
    assert fetched == created
    assert ledger.get_expense_by_id(created.id).created_at == created.created_at


def test_add_expense_stores_camel_case_records(ledger: LedgerRepository, store: MemoryStore) -> None:
    ledger.add_expense(_draft())
    raw = store.read(EXPENSES)[0]
    assert set(raw) == {"id", "amount", "date", "categoryId", "description", "notes", "createdAt"}


def test_add_expense_does_not_check_category(ledger: LedgerRepository) -> None:
    assert ledger.add_expense(_draft(category_id="missing")).ok


def test_add_expense_rejects_bad_amount(ledger: LedgerRepository) -> None:
    for bad in ("abc", "", "-3", 0, "nan"):
        res = ledger.add_expense(_draft(amount=bad))
        assert not res
        assert res.error == LedgerErrorCode.INVALID_AMOUNT
    assert ledger.get_expenses() == []


def test_get_expense_by_id_missing_returns_none(ledger: LedgerRepository) -> None:
    assert ledger.get_expense_by_id("nope") is None


def test_update_expense_keeps_id_and_created_at(ledger: LedgerRepository) -> None:
    created = ledger.add_expense(_draft()).value
    res = ledger.update_expense(
        created.id, _draft(amount="20.10", date="2024-06-02", category_id="c2", description=" Lunch ", notes=None)
    )
    assert res.ok
    got = ledger.get_expense_by_id(created.id)
    assert got.id == created.id
    assert got.created_at == created.created_at
    assert got.amount == 20.1
    assert got.date == "2024-06-02"
    assert got.category_id == "c2"
    assert got.description == "Lunch"
    assert got.notes == ""


def test_update_missing_expense_leaves_collection(ledger: LedgerRepository, store: MemoryStore) -> None:
    ledger.add_expense(_draft())
    before = store.read(EXPENSES)
    res = ledger.update_expense("nope", _draft(amount=99))
    assert not res
    assert res.error == LedgerErrorCode.NOT_FOUND
    assert store.read(EXPENSES) == before


def test_delete_expense(ledger: LedgerRepository) -> None:
    a = ledger.add_expense(_draft()).value
    ledger.add_expense(_draft(description="Tea"))
    assert ledger.delete_expense(a.id)
    assert [e.description for e in ledger.get_expenses()] == ["Tea"]

    res = ledger.delete_expense(a.id)
    assert res.error == LedgerErrorCode.NOT_FOUND


def test_bulk_delete_counts_existing_only(ledger: LedgerRepository) -> None:
    ids = [ledger.add_expense(_draft(description=f"e{i}")).value.id for i in range(3)]
    assert ledger.delete_expenses([ids[0], ids[2], "ghost"]) == 2
    assert [e.id for e in ledger.get_expenses()] == [ids[1]]
    assert ledger.delete_expenses(["ghost"]) == 0


def test_list_expenses_newest_first_invalid_dates_last(ledger: LedgerRepository) -> None:
    ledger.add_expense(_draft(date="2024-01-15", description="jan"))
    ledger.add_expense(_draft(date="not-a-date", description="bad"))
    ledger.add_expense(_draft(date="2024-03-02", description="mar"))
    ledger.add_expense(_draft(date="2024-03-02", description="mar2"))
    assert [e.description for e in ledger.list_expenses()] == ["mar", "mar2", "jan", "bad"]
    assert [e.description for e in ledger.recent_expenses(2)] == ["mar", "mar2"]


def test_invalid_stored_records_are_skipped_but_kept(store: MemoryStore) -> None:
    store.write(
        EXPENSES,
        [
            {"id": "ok", "amount": 5, "date": "2024-01-01", "categoryId": "c1", "createdAt": "x"},
            {"id": "junk", "amount": "lots"},
        ],
    )
    ledger = LedgerRepository(store)
    assert [e.id for e in ledger.get_expenses()] == ["ok"]

    ledger.add_expense(_draft())
    assert [r["id"] for r in store.read(EXPENSES)][:2] == ["ok", "junk"]


def test_amount_overflowing_float_is_rejected(ledger: LedgerRepository) -> None:
    res = ledger.add_expense(_draft(amount="1e400"))
    assert res.error == LedgerErrorCode.INVALID_AMOUNT
    assert ledger.get_expenses() == []

    created = ledger.add_expense(_draft()).value
    upd = ledger.update_expense(created.id, _draft(amount="1e400"))
    assert upd.error == LedgerErrorCode.INVALID_AMOUNT
    assert ledger.get_expense_by_id(created.id).amount == 10.0
