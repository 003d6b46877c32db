import hashlib
import hmac

import requests

from app.utils import payment_helper


def _sign(order_id, payment_id, secret="rzp_test_secret"):
    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


def test_verify_accepts_gateway_signature(client):
    response = client.post("/api/payment/verify", json={
        "razorpay_order_id": "order_1",
        "razorpay_payment_id": "pay_1",
        "razorpay_signature": _sign("order_1", "pay_1"),
    })
    assert response.status_code == 200
    assert response.get_json()["paymentId"] == "pay_1"


def test_verify_rejects_tampered_signature(client):
    response = client.post("/api/payment/verify", json={
        "razorpay_order_id": "order_1",
        "razorpay_payment_id": "pay_2",
        "razorpay_signature": _sign("order_1", "pay_1"),
    })
    assert response.status_code == 400
    assert client.post("/api/payment/verify", json={}).status_code == 400


class _FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


def test_create_order_calls_gateway(client, monkeypatch):
    calls = {}

    def fake_post(url, json=None, auth=None, timeout=None):
        calls.update(url=url, json=json, auth=auth)
        return _FakeResponse({"id": "order_abc", "amount": json["amount"], "currency": json["currency"]})

    monkeypatch.setattr(payment_helper.requests, "post", fake_post)

    response = client.post("/api/payment/create-order", json={"amount": 45000})
    assert response.status_code == 200
    assert response.get_json()["id"] == "order_abc"
    assert calls["json"]["currency"] == "INR"
    assert calls["json"]["receipt"].startswith("receipt_")
    assert calls["auth"] == ("rzp_test_key", "rzp_test_secret")


def test_create_order_gateway_failure(client, monkeypatch):
    monkeypatch.setattr(
        payment_helper.requests, "post", lambda *a, **kw: _FakeResponse({}, status_code=500)
    )
    response = client.post("/api/payment/create-order", json={"amount": 100})
    assert response.status_code == 502


def test_create_order_requires_amount(client):
    assert client.post("/api/payment/create-order", json={}).status_code == 400
    assert client.post("/api/payment/create-order", json={"amount": "lots"}).status_code == 400
