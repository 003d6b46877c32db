"""
Payment routes: thin boundary to the payment gateway
    POST   /api/payment/create-order   - open a gateway order for the checkout total
    POST   /api/payment/verify         - check the gateway's payment signature
"""

from flask import Blueprint, request, jsonify
from app.utils import payment_helper

payment_bp = Blueprint("payment", __name__)


@payment_bp.route("/create-order", methods=["POST"])
def create_order():
    """
    Request body:
    { "amount": 450000, "currency": "INR" }    // amount in paise
    """
    data = request.get_json(silent=True) or {}
    amount = data.get("amount")

    if not amount:
        return jsonify({"error": "Amount is required"}), 400
    try:
        amount = int(amount)
    except (TypeError, ValueError):
        return jsonify({"error": "Amount must be an integer"}), 400
    if amount <= 0:
        return jsonify({"error": "Amount must be greater than 0"}), 400

    try:
        order = payment_helper.create_order(amount, data.get("currency") or "INR")
    except payment_helper.PaymentError as e:
        return jsonify({"error": str(e)}), 502

    return jsonify(order), 200


@payment_bp.route("/verify", methods=["POST"])
def verify_payment():
    data = request.get_json(silent=True) or {}
    order_id = data.get("razorpay_order_id")
    payment_id = data.get("razorpay_payment_id")
    signature = data.get("razorpay_signature")

    if not order_id or not payment_id or not signature:
        return jsonify({"error": "razorpay_order_id, razorpay_payment_id and razorpay_signature are required"}), 400

    if not payment_helper.verify_signature(order_id, payment_id, signature):
        return jsonify({"error": "Invalid Signature"}), 400

    return jsonify({"message": "Payment verified successfully", "paymentId": payment_id}), 200
