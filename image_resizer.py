import logging
import os
from io import BytesIO
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from gemini_service import ModelImage

logger = logging.getLogger(__name__)

DEFAULT_MAX_DIMENSION = int(os.environ.get("MAX_IMAGE_DIMENSION", "1024"))


def prepare_image_for_model(image_bytes: bytes, mime_type: Optional[str] = None,
                            max_dimension: int = DEFAULT_MAX_DIMENSION) -> Optional[ModelImage]:
    """
    Normalise an uploaded packaging photo before it is sent to the model:
    honour EXIF orientation, flatten transparency onto white, shrink so the
    longest side is at most `max_dimension`, and re-encode as JPEG.
    Bytes Pillow cannot decode are passed through with their declared type.
    """
    if not image_bytes:
        return None

    try:
        with Image.open(BytesIO(image_bytes)) as img:
            img = ImageOps.exif_transpose(img)
            if img.mode in ('RGBA', 'LA') or (img.mode == 'P' and 'transparency' in img.info):
                img = img.convert('RGBA')
                background = Image.new('RGB', img.size, (255, 255, 255))
                background.paste(img, mask=img.getchannel('A'))
                img = background
            img.thumbnail((max_dimension, max_dimension))

            output_buffer = BytesIO()
            img.convert('RGB').save(output_buffer, "JPEG", quality=85)
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Could not decode uploaded image, sending it unchanged: {e}")
        return ModelImage(data=image_bytes, mime_type=mime_type or "application/octet-stream")

    return ModelImage(data=output_buffer.getvalue(), mime_type="image/jpeg")
