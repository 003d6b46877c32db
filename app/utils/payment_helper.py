import hashlib
import hmac
import logging
import uuid
import requests
from flask import current_app

logger = logging.getLogger(__name__)


class PaymentError(Exception):
    pass


def create_order(amount: int, currency: str = "INR") -> dict:
    """
    Create a gateway order. ``amount`` is in the currency's smallest unit.
    Returns the gateway's order payload unchanged.
    """
    payload = {
        "amount": amount,
        "currency": currency,
        "receipt": f"receipt_{uuid.uuid4().hex[:8]}",
    }
    try:
        response = requests.post(
            current_app.config["RAZORPAY_ORDERS_URL"],
            json=payload,
            auth=(current_app.config["RAZORPAY_KEY_ID"], current_app.config["RAZORPAY_KEY_SECRET"]),
            timeout=30,
        )
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.error("Payment order creation failed: %s", e)
        raise PaymentError("Error creating payment order") from e
    return response.json()


def expected_signature(order_id: str, payment_id: str, secret: str) -> str:
    body = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(order_id: str, payment_id: str, signature: str) -> bool:
    secret = current_app.config["RAZORPAY_KEY_SECRET"]
    if not secret or not signature:
        return False
    return hmac.compare_digest(expected_signature(order_id, payment_id, secret), signature)
