"""Rotating check-in code: JSON payload, QR image rendering and decoding."""

from __future__ import annotations

import io
import json
from typing import BinaryIO

import qrcode
from PIL import Image

from ..classes.model import ClassLocation
from ..common.datetime_utils import parse_iso_datetime
from ..core.exceptions import InvalidCheckInCodeError
from .model import CheckInPayload

REQUIRED_FIELDS = ("sessionToken", "classId", "className", "location", "expiresAt")


def encode_payload(payload: CheckInPayload) -> str:
    return json.dumps(payload.to_dict(), separators=(",", ":"))


def parse_payload(raw: str) -> CheckInPayload:
    """Parse a scanned code back into a payload.

    Raises InvalidCheckInCodeError when fields are missing or malformed.
    """

    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        raise InvalidCheckInCodeError("Check-in code is not valid JSON") from None

    if not isinstance(data, dict) or any(field not in data for field in REQUIRED_FIELDS):
        raise InvalidCheckInCodeError("Check-in code is missing required fields")

    location = data["location"]
    if (
        not isinstance(location, dict)
        or not isinstance(location.get("lat"), (int, float))
        or not isinstance(location.get("lng"), (int, float))
    ):
        raise InvalidCheckInCodeError("Check-in code has an invalid location")

    try:
        expires_at = parse_iso_datetime(str(data["expiresAt"]))
        class_id = int(data["classId"])
    except (TypeError, ValueError):
        raise InvalidCheckInCodeError("Check-in code has an invalid class or expiry") from None

    token = data["sessionToken"]
    if not isinstance(token, str) or not token:
        raise InvalidCheckInCodeError("Check-in code has no session token")

    return CheckInPayload(
        session_token=token,
        class_id=class_id,
        class_name=str(data["className"]),
        location=ClassLocation(
            latitude=float(location["lat"]),
            longitude=float(location["lng"]),
            label=str(location.get("label") or ""),
        ),
        expires_at=expires_at,
    )


def extract_token(raw: str) -> str:
    """Accept either a full JSON payload or a bare session token."""

    text = (raw or "").strip()
    if not text:
        raise InvalidCheckInCodeError("Check-in code is empty")
    if text.startswith("{"):
        return parse_payload(text).session_token
    return text


def render_qr_png(payload: CheckInPayload, *, box_size: int = 10, border: int = 2) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(encode_payload(payload))
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_qr_image(stream: BinaryIO) -> str:
    """Return the text of the first QR code found in an uploaded image."""

    # pyzbar loads the zbar shared library on import.
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except (OSError, ValueError):
        raise InvalidCheckInCodeError("Uploaded file is not an image") from None

    decoded = pyzbar_decode(img)
    if not decoded:
        raise InvalidCheckInCodeError("No check-in code found in the image")
    return decoded[0].data.decode("utf-8").strip()
