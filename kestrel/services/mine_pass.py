"""Mine pass badges: the QR payload a gate scanner reads back as qrData."""
import json
import time
from io import BytesIO
from typing import Optional

import qrcode
from PIL import Image as PILImage

from ..models.models import Worker


def mine_pass_payload(worker: Worker, timestamp_ms: Optional[int] = None) -> str:
    """Compact JSON identifying the worker; the scanner posts it back verbatim."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return json.dumps(
        {
            "id": str(worker.id),
            "name": worker.name,
            "employeeId": worker.employee_id,
            "status": worker.status,
            "timestamp": timestamp_ms,
        },
        separators=(",", ":"),
    )


def generate_qr_code_image(data: str, size: int = 200) -> BytesIO:
    """Generate QR code image as BytesIO"""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    img = img.resize((size, size), PILImage.Resampling.NEAREST)

    buffer = BytesIO()
    img.save(buffer, format="PNG")
    buffer.seek(0)
    return buffer
