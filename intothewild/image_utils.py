from PIL import Image, UnidentifiedImageError
import io
import logging

logger = logging.getLogger(__name__)

def process_proof_image(file_stream, max_size=(1600, 1600), quality=85):
    """
    Resizes and compresses an uploaded proof photo (payment screenshot, ID scan).

    :param file_stream: byte stream of the uploaded image.
    :param max_size: (width, height) bound; aspect ratio is kept.
    :param quality: JPEG quality (0-100).
    :return: a BytesIO with the processed image and its content type,
             or (None, None) when the stream is not a readable image.
    """
    try:
        img = Image.open(file_stream)

        # Palette (some GIFs) and alpha (PNG) images have to become RGB for JPEG
        if img.mode in ('P', 'RGBA', 'LA'):
            img = img.convert('RGB')

        img.thumbnail(max_size, Image.Resampling.LANCZOS)

        img_byte_arr = io.BytesIO()
        img.save(img_byte_arr, format='JPEG', quality=quality, optimize=True)

        # Rewind so boto3 reads from the start
        img_byte_arr.seek(0)

        return img_byte_arr, 'image/jpeg'

    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Could not process image: {e}")
        return None, None
