"""QR codes carrying an instrument id, and lookup of scanned payloads."""

from __future__ import annotations

from io import BytesIO
from typing import Iterable

import qrcode

from ..schemas.lab import Instrument
from .catalog import find_instrument


def render_instrument_qr_png(instrument_id: str) -> bytes:
    """PNG whose payload is exactly the instrument id."""

    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=4,
    )
    qr.add_data(instrument_id)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def find_scanned_instrument(instruments: Iterable[Instrument], scanned: str | None) -> Instrument | None:
    """Instrument whose id equals the scanned text, ignoring surrounding whitespace."""

    payload = (scanned or "").strip()
    if not payload:
        return None
    return find_instrument(instruments, payload)
