import datetime
import re
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from crud.card_crud import mask_card_number, get_card_brand, format_currency, expiry_for
from model.cards_model import Card, CardFreezeHistory


def test_create_card_defaults(client, db, user, new_card):
    card = new_card(user, holder="  alice doe ")

    assert card["card_holder_name"] == "ALICE DOE"
    assert re.fullmatch(r"4\d{3} XXXX XXXX \d{4}", card["card_number_masked"])
    assert re.fullmatch(r"\d{2}/\d{2}", card["expiry_date"])
    assert card["card_type"] == "debit"
    assert card["card_status"] == "active"
    assert card["card_brand"] == "visa"
    assert card["card_color"] == "gradient-blue"
    assert Decimal(card["current_balance"]) == Decimal("0")
    assert card["is_frozen"] is False
    assert "card_number" not in card
    assert "cvv" not in card

    stored = db.get(Card, card["id"])
    assert "XXXX" not in stored.card_number_encrypted
    assert not stored.card_number_encrypted.startswith("4")


def test_create_card_requires_holder_name(client, user):
    resp = client.post("/cards/", json={"card_holder_name": "   "}, headers=user["headers"])
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Please enter a card holder name"


def test_card_details_reveal_decrypted_number(client, user, new_card):
    card = new_card(user)

    details = client.get(f"/cards/{card['id']}/details", headers=user["headers"]).json()

    assert re.fullmatch(r"4\d{15}", details["card_number"])
    assert mask_card_number(details["card_number"]) == card["card_number_masked"]
    assert re.fullmatch(r"\d{3}", details["cvv"])


def test_cards_are_private(client, make_user, new_card):
    alice = make_user()
    bob = make_user(email="bob@example.com", full_name="Bob Roe")
    card = new_card(alice)

    assert client.get(f"/cards/{card['id']}", headers=bob["headers"]).status_code == 404
    assert client.get(f"/cards/{card['id']}/details", headers=bob["headers"]).status_code == 404
    assert client.get("/cards/", headers=bob["headers"]).json() == []


def test_list_cards_newest_first(client, user, new_card):
    first = new_card(user)
    second = new_card(user)

    ids = [c["id"] for c in client.get("/cards/", headers=user["headers"]).json()]
    assert ids == [second["id"], first["id"]]


def test_freeze_and_unfreeze_record_history(client, user, new_card):
    card = new_card(user)

    frozen = client.post(f"/cards/{card['id']}/freeze", json={"reason": "lost"}, headers=user["headers"]).json()
    assert frozen["is_frozen"] is True
    assert frozen["card_status"] == "frozen"
    assert frozen["freeze_reason"] == "lost"
    assert frozen["frozen_at"] is not None

    thawed = client.post(f"/cards/{card['id']}/unfreeze", headers=user["headers"]).json()
    assert thawed["is_frozen"] is False
    assert thawed["card_status"] == "active"
    assert thawed["freeze_reason"] is None
    assert thawed["frozen_at"] is None

    history = client.get(f"/cards/{card['id']}/freeze-history", headers=user["headers"]).json()
    assert [h["action"] for h in history] == ["unfreeze", "freeze"]
    assert history[1]["reason"] == "lost"
    assert history[0]["reason"] == "User requested unfreeze"


def test_freeze_without_body_uses_default_reason(client, user, new_card):
    card = new_card(user)
    frozen = client.post(f"/cards/{card['id']}/freeze", headers=user["headers"]).json()
    assert frozen["freeze_reason"] == "User requested freeze"


def test_freeze_survives_history_failure(client, db, user, new_card, monkeypatch):
    card = new_card(user)

    def broken_history(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("table locked"))

    monkeypatch.setattr("crud.card_crud.CardFreezeHistory", broken_history)

    resp = client.post(f"/cards/{card['id']}/freeze", headers=user["headers"])

    assert resp.status_code == 200
    assert resp.json()["is_frozen"] is True
    assert db.query(CardFreezeHistory).count() == 0


def test_default_limits_and_partial_update(client, user, new_card):
    card = new_card(user)

    limits = client.get(f"/cards/{card['id']}/limits", headers=user["headers"]).json()
    assert Decimal(limits["daily_purchase_limit"]) == Decimal("5000")
    assert Decimal(limits["daily_withdrawal_limit"]) == Decimal("1000")
    assert Decimal(limits["monthly_limit"]) == Decimal("50000")
    assert limits["contactless_enabled"] is True

    updated = client.patch(
        f"/cards/{card['id']}/limits",
        json={"daily_purchase_limit": "250.00", "contactless_enabled": False},
        headers=user["headers"],
    ).json()
    assert Decimal(updated["daily_purchase_limit"]) == Decimal("250.00")
    assert updated["contactless_enabled"] is False
    assert Decimal(updated["monthly_limit"]) == Decimal("50000")


def test_delete_card(client, user, new_card):
    card = new_card(user)

    assert client.delete(f"/cards/{card['id']}", headers=user["headers"]).status_code == 204
    assert client.get(f"/cards/{card['id']}", headers=user["headers"]).status_code == 404


def test_user_transactions_across_cards(client, user, accounts_of, new_card, set_account_balance):
    checking = accounts_of(user)["checking"]
    set_account_balance(checking["id"], "100.00")
    first, second = new_card(user), new_card(user)
    for card, amount in ((first, "10.00"), (second, "20.00")):
        resp = client.post(
            f"/cards/{card['id']}/fund",
            json={"account_id": checking["id"], "amount": amount},
            headers=user["headers"],
        )
        assert resp.status_code == 200, resp.text

    txs = client.get("/cards/transactions", headers=user["headers"]).json()
    assert [Decimal(t["amount"]) for t in txs] == [Decimal("20.00"), Decimal("10.00")]
    assert {t["transaction_type"] for t in txs} == {"payment"}


@pytest.mark.parametrize("number, expected", [
    ("4111111111111111", "4111 XXXX XXXX 1111"),
    ("5500000000000004", "5500 XXXX XXXX 0004"),
    ("12345", "12345"),
    ("", ""),
])
def test_mask_card_number(number, expected):
    assert mask_card_number(number) == expected


@pytest.mark.parametrize("number, brand", [
    ("4111111111111111", "Visa"),
    ("5212345678901234", "Mastercard"),
    ("371449635398431", "American Express"),
    ("6011000990139424", "Discover"),
    ("6500000000000002", "Discover"),
    ("9999999999999999", "Unknown"),
])
def test_get_card_brand(number, brand):
    assert get_card_brand(number) == brand


def test_format_currency():
    assert format_currency(Decimal("1234.5")) == "$1,234.50"
    assert format_currency(0) == "$0.00"


def test_expiry_is_four_years_out():
    assert expiry_for(datetime.datetime(2026, 3, 17)) == ("03/30", datetime.datetime(2030, 3, 1))
