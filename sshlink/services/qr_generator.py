"""QR Code generation utility."""
import io
from dataclasses import dataclass

import qrcode
from qrcode.exceptions import DataOverflowError
from qrcode.image.pil import PilImage
from qrcode.util import MODE_8BIT_BYTE, QRData

from sshlink.services.errors import ImageEncodingFailure, InvalidField, PayloadTooLarge


ERROR_CORRECTION = qrcode.constants.ERROR_CORRECT_M
BORDER = 4
MAX_PIXELS = 550

DARK_COLOR = (123, 255, 6)
LIGHT_COLOR = (28, 32, 31)


@dataclass(frozen=True)
class QrImage:
    png: bytes
    width: int
    height: int
    modules: int
    box_size: int


def box_size_for(modules: int, border: int = BORDER, max_pixels: int = MAX_PIXELS) -> int:
    """Largest whole-pixel module size that keeps the image within max_pixels."""
    return max(1, max_pixels // (modules + 2 * border))


def build_qr(text: str) -> qrcode.QRCode:
    """Lay out text as a byte-mode QR code at level M, picking the smallest version."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECTION,
        box_size=1,
        border=BORDER,
    )
    try:
        data = text.encode("ascii")
    except UnicodeEncodeError as e:
        raise InvalidField(f"QR text must be ASCII: {e}", field="uri") from e
    qr.add_data(QRData(data, mode=MODE_8BIT_BYTE))
    try:
        qr.make(fit=True)
    except DataOverflowError as e:
        raise PayloadTooLarge(
            f"{len(text)} bytes do not fit in a version 40 QR code at level M"
        ) from e
    return qr


def render_qr(text: str) -> QrImage:
    qr = build_qr(text)
    qr.box_size = box_size_for(qr.modules_count)

    img = qr.make_image(
        image_factory=PilImage,
        fill_color=DARK_COLOR,
        back_color=LIGHT_COLOR,
    )
    buffer = io.BytesIO()
    try:
        img.save(buffer, format="PNG")
    except (OSError, ValueError) as e:
        raise ImageEncodingFailure(f"could not write QR image as PNG: {e}") from e

    return QrImage(
        png=buffer.getvalue(),
        width=img.pixel_size,
        height=img.pixel_size,
        modules=qr.modules_count,
        box_size=qr.box_size,
    )


def render_qr_file(text: str, filepath: str) -> QrImage:
    image = render_qr(text)
    with open(filepath, "wb") as f:
        f.write(image.png)
    return image
