"""
Aadhaar OTP verification for rental undertakings.
Without AADHAAR_API_KEY the helper runs in mock mode: any number gets an OTP
and "123456" is the only accepted code.
"""

import logging
import time
import requests
from flask import current_app

logger = logging.getLogger(__name__)

MOCK_OTP = "123456"
MOCK_DOCUMENT_URL = "https://example.com/mock_kyc_document.pdf"


class AadhaarError(Exception):
    pass


def _is_mock() -> bool:
    return not current_app.config.get("AADHAAR_API_KEY")


def _post(url: str, body: dict) -> dict:
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {current_app.config['AADHAAR_API_KEY']}",
    }
    try:
        response = requests.post(url, json=body, headers=headers, timeout=30)
        data = response.json()
    except requests.exceptions.RequestException as e:
        logger.error("Aadhaar API unreachable: %s", e)
        raise AadhaarError("Could not reach the Aadhaar verification service") from e
    except ValueError as e:
        raise AadhaarError("Unexpected response from the Aadhaar verification service") from e

    if not response.ok or data.get("status_code") != 200:
        raise AadhaarError(data.get("message") or "Aadhaar verification failed")
    return data.get("data") or {}


def generate_otp(aadhaar_number: str) -> str:
    """Request an OTP for the number. Returns the provider's client id."""
    if _is_mock():
        logger.info("Mock Aadhaar OTP generated")
        return f"mock_client_{int(time.time() * 1000)}"

    data = _post(current_app.config["AADHAAR_GENERATE_OTP_URL"], {"id_number": aadhaar_number})
    client_id = data.get("client_id")
    if not client_id:
        raise AadhaarError("Failed to generate OTP from Aadhaar authority")
    return client_id


def submit_otp(client_id: str, otp: str) -> str:
    """Verify the OTP. Returns a URL (or marker) for the verified KYC document."""
    if _is_mock():
        if otp != MOCK_OTP:
            raise AadhaarError(f"Invalid Mock OTP. Please use {MOCK_OTP}.")
        return MOCK_DOCUMENT_URL

    data = _post(current_app.config["AADHAAR_SUBMIT_OTP_URL"], {"client_id": client_id, "otp": otp})
    return data.get("profile_image") or "verified_via_api"
