from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from app.errors import InsufficientBalanceError
from app.internal_transfer_service import transfer_between_accounts
from crud import account_crud, internal_transfer_crud
from model.internal_transfer_model import InternalTransfer


def _boom(*args, **kwargs):
    raise OperationalError("UPDATE", {}, Exception("connection lost"))


def _transfer(client, user, source_id, target_id, amount):
    return client.post(
        "/accounts/transfers",
        json={"from_account_id": source_id, "to_account_id": target_id, "amount": amount},
        headers=user["headers"],
    )


def test_checking_to_savings(client, user, accounts_of, set_account_balance):
    accounts = accounts_of(user)
    checking, savings = accounts["checking"], accounts["savings"]
    set_account_balance(checking["id"], "100.00")

    resp = _transfer(client, user, checking["id"], savings["id"], "40.00")

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["transfer"]["from_account_type"] == "checking"
    assert body["transfer"]["to_account_type"] == "savings"
    assert body["transfer"]["reference"].startswith("TXN")
    assert body["transfer"]["description"] == "Internal transfer from My Checking Account to My Savings Account"
    refreshed = {a["account_type"]: a for a in body["accounts"]}
    assert Decimal(refreshed["checking"]["checking_balance"]) == Decimal("60.00")
    assert Decimal(refreshed["savings"]["savings_balance"]) == Decimal("40.00")

    history = client.get("/accounts/transfers", headers=user["headers"]).json()
    assert [t["id"] for t in history] == [body["transfer"]["id"]]


def test_savings_back_to_checking(client, user, accounts_of, set_account_balance):
    accounts = accounts_of(user)
    set_account_balance(accounts["savings"]["id"], "25.50", field="savings_balance")

    resp = _transfer(client, user, accounts["savings"]["id"], accounts["checking"]["id"], "25.50")

    assert resp.status_code == 201, resp.text
    after = accounts_of(user)
    assert Decimal(after["savings"]["savings_balance"]) == Decimal("0")
    assert Decimal(after["checking"]["checking_balance"]) == Decimal("25.50")


def test_insufficient_balance_moves_nothing(client, db, user, accounts_of, set_account_balance):
    accounts = accounts_of(user)
    set_account_balance(accounts["checking"]["id"], "20.00")

    resp = _transfer(client, user, accounts["checking"]["id"], accounts["savings"]["id"], "30.00")

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Insufficient balance in checking account. Available: $20.00"
    after = accounts_of(user)
    assert Decimal(after["checking"]["checking_balance"]) == Decimal("20.00")
    assert Decimal(after["savings"]["savings_balance"]) == Decimal("0")
    assert db.query(InternalTransfer).count() == 0


def test_rejects_bad_requests(client, make_user, accounts_of):
    alice = make_user()
    bob = make_user(email="bob@example.com", full_name="Bob Roe")
    mine = accounts_of(alice)
    theirs = accounts_of(bob)

    same = _transfer(client, alice, mine["checking"]["id"], mine["checking"]["id"], "1.00")
    assert same.status_code == 400
    assert _transfer(client, alice, mine["checking"]["id"], theirs["savings"]["id"], "1.00").status_code == 404
    assert _transfer(client, alice, mine["checking"]["id"], mine["savings"]["id"], "0").status_code == 422


def test_stale_source_balance_is_caught_by_guard(db, user, accounts_of, set_account_balance):
    accounts = accounts_of(user)
    set_account_balance(accounts["checking"]["id"], "100.00")
    source = account_crud.get_account(db, accounts["checking"]["id"])
    target = account_crud.get_account(db, accounts["savings"]["id"])
    assert source.checking_balance == Decimal("100.00")
    # drained by another session after it was loaded
    set_account_balance(accounts["checking"]["id"], "10.00")

    with pytest.raises(InsufficientBalanceError):
        transfer_between_accounts(db, user["id"], source, target, "30.00")

    db.expire_all()
    assert account_crud.get_account(db, accounts["checking"]["id"]).checking_balance == Decimal("10.00")
    assert account_crud.get_account(db, accounts["savings"]["id"]).savings_balance == Decimal("0")
    assert db.query(InternalTransfer).count() == 0


def test_failed_credit_rolls_back_the_debit(client, db, user, accounts_of, set_account_balance, monkeypatch):
    accounts = accounts_of(user)
    set_account_balance(accounts["checking"]["id"], "100.00")
    monkeypatch.setattr(internal_transfer_crud, "apply_credit", _boom)

    resp = _transfer(client, user, accounts["checking"]["id"], accounts["savings"]["id"], "30.00")

    assert resp.status_code == 502
    after = accounts_of(user)
    assert Decimal(after["checking"]["checking_balance"]) == Decimal("100.00")
    assert Decimal(after["savings"]["savings_balance"]) == Decimal("0")
    assert db.query(InternalTransfer).count() == 0
