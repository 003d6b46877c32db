import re
from flask_cors import CORS

from app.utils.logging_helper import REQUEST_ID_HEADER

# Dev storefront on any local port
LOCAL_ORIGINS = [
    re.compile(r"^http://localhost:\d+$"),
    re.compile(r"^http://127\.0\.0\.1:\d+$"),
]


def parse_origins(allowed: str | None) -> list[str]:
    return [o.strip() for o in (allowed or "").split(",") if o.strip()]


def configure_cors(app, allowed: str | None) -> None:
    """
    Allow the storefront origins listed in ALLOWED_ORIGINS, plus localhost.
    Credentials are allowed so the Authorization header reaches the API.
    """
    CORS(
        app,
        origins=[*parse_origins(allowed), *LOCAL_ORIGINS],
        supports_credentials=True,
        expose_headers=[REQUEST_ID_HEADER],
    )
