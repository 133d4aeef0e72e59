import base64
import binascii
import io
from PIL import Image as PILImage

DATA_URL_PREFIX = "data:image/"
MAX_SCREENSHOT_SIZE = 10 * 1024 * 1024  # 10 MB


def estimated_data_url_size(data_url):
    """Decoded size of a base64 data URL without decoding it."""
    return len(data_url) * 3 // 4


def _verify(image_bytes):
    try:
        img = PILImage.open(io.BytesIO(image_bytes))
        img.verify()  # verify it's a real image
    except Exception:
        raise ValueError("Invalid image file")


def validate_reference_image(data_url, max_bytes):
    """Validate a reference image supplied as a ``data:image/...`` URL.

    Returns:
        The data URL, unchanged, for forwarding to the generation API

    Raises:
        ValueError on invalid input
    """
    if not isinstance(data_url, str) or not data_url.startswith(DATA_URL_PREFIX):
        raise ValueError("Invalid image format: expected a data:image/... URL")

    size = estimated_data_url_size(data_url)
    if size > max_bytes:
        raise ValueError(
            f"Image too large ({size // 1024}KB). Maximum is {max_bytes // (1024 * 1024)}MB."
        )

    header, _, encoded = data_url.partition(",")
    if ";base64" not in header or not encoded:
        raise ValueError("Invalid image format: data URL must be base64 encoded")
    try:
        image_bytes = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("Invalid image format: malformed base64 payload")

    _verify(image_bytes)
    return data_url


def reference_image_from_upload(image_bytes, content_type, max_bytes):
    """Turn an uploaded image file into a data URL after validating it."""
    if not content_type or not content_type.startswith("image/"):
        raise ValueError("Invalid image format: upload must declare an image media type")
    if len(image_bytes) > max_bytes:
        raise ValueError(
            f"Image too large ({len(image_bytes) // 1024}KB). "
            f"Maximum is {max_bytes // (1024 * 1024)}MB."
        )
    _verify(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def prepare_screenshot(image_bytes):
    """Validate a preview screenshot and re-encode it as PNG.

    Re-encoding drops metadata embedded by the capturing browser.

    Raises:
        ValueError on invalid input
    """
    if len(image_bytes) > MAX_SCREENSHOT_SIZE:
        raise ValueError(
            f"Screenshot too large: {len(image_bytes)} bytes (max {MAX_SCREENSHOT_SIZE})"
        )
    _verify(image_bytes)

    # Re-open (verify() closes the file)
    img = PILImage.open(io.BytesIO(image_bytes))
    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG", optimize=True)
    return buffer.getvalue()
