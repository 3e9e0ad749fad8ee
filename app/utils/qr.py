import os
import qrcode
from app.core.config import settings


QR_CODE_DIR = settings.static_dir / "qrcodes"
STATIC_URL_PREFIX = "/static/qrcodes"


def tracking_url(token: str) -> str:
    """Public page where a client reads its missions."""
    return f"{settings.tracking_base_url.rstrip('/')}/{token}"


def generate_tracking_qr(token: str) -> str:
    """
    Renders the tracking link of a client as a PNG under the static
    directory and returns the URL it is served from.

    The file is named after the token, so rotating the token produces a new
    image and never overwrites one already printed on a delivery note.
    """
    os.makedirs(QR_CODE_DIR, exist_ok=True)

    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(tracking_url(token))
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    file_path = QR_CODE_DIR / f"tracking_{token}.png"
    if not file_path.exists():
        img.save(file_path)

    return f"{settings.public_url}{STATIC_URL_PREFIX}/tracking_{token}.png"
