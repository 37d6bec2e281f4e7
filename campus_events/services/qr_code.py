"""
QR payload codec and image rendering for tickets.

The payload is a versioned JSON envelope:

    {"eventId": "12", "issuedAt": "2026-01-01T10:00:00+00:00",
     "ticketId": "<uuid4>", "userId": "7", "v": 1}

serialized with sorted keys and compact separators so the same ticket always
produces the same string. Tickets are looked up by exact match on that
string; decoding only checks that the scan is well formed.
"""
import base64
import io
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import qrcode

from campus_events.core.config import settings
from campus_events.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

QR_PAYLOAD_VERSION = 1
SUPPORTED_VERSIONS = {QR_PAYLOAD_VERSION}


def build_payload(
    ticket_id: str, event_id: Any, user_id: Any, issued_at: Optional[datetime] = None
) -> str:
    issued_at = issued_at or datetime.now(timezone.utc)
    envelope = {
        "v": QR_PAYLOAD_VERSION,
        "ticketId": ticket_id,
        "eventId": str(event_id),
        "userId": str(user_id),
        "issuedAt": issued_at.isoformat(),
    }
    return json.dumps(envelope, sort_keys=True, separators=(",", ":"))


def parse_payload(raw: Any) -> Dict[str, Any]:
    """Decode a scanned payload, raising ValidationError when it is malformed.

    Envelopes without a ``v`` key are accepted as long as they carry a
    ticketId; older tickets were issued that way.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("Invalid QR format")
    try:
        payload = json.loads(raw)
    except ValueError:
        raise ValidationError("Invalid QR format")

    if not isinstance(payload, dict):
        raise ValidationError("Invalid QR format")

    ticket_id = payload.get("ticketId")
    if not isinstance(ticket_id, str) or not ticket_id:
        raise ValidationError("Invalid QR format", {"reason": "missing ticketId"})

    version = payload.get("v")
    if version is not None and version not in SUPPORTED_VERSIONS:
        raise ValidationError("Unsupported QR payload version", {"version": version})

    return payload


def render_qr_data_url(payload: str, box_size: Optional[int] = None, border: Optional[int] = None) -> str:
    """Render the payload as a base64 PNG data URL."""
    qr = qrcode.QRCode(
        version=None,
        box_size=box_size or settings.QR_BOX_SIZE,
        border=border if border is not None else settings.QR_BORDER,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    img_buffer = io.BytesIO()
    img.save(img_buffer, format="PNG")
    img_str = base64.b64encode(img_buffer.getvalue()).decode()
    return f"data:image/png;base64,{img_str}"
