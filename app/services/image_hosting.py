"""
Client for the ImgBB upload API, used to obtain a public URL for generated images.
"""
import base64
import logging
from typing import Optional
import requests
from app.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)

IMGBB_UPLOAD_URL = "https://api.imgbb.com/1/upload"
UPLOAD_TIMEOUT_SECONDS = 30


def upload_image(image_bytes: bytes, api_key: Optional[str]) -> str:
    """Upload raw image bytes and return the hosted image URL."""
    image_base64 = base64.b64encode(image_bytes).decode()

    try:
        response = requests.post(
            IMGBB_UPLOAD_URL,
            params={"key": api_key},
            data={"image": image_base64},
            timeout=UPLOAD_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        return response.json()["data"]["url"]
    except requests.exceptions.RequestException as e:
        logger.error("ImgBB upload failed: %s", e)
        raise UpstreamError("Error during generation")
    except (ValueError, KeyError, TypeError) as e:
        logger.error("ImgBB returned an unexpected payload: %s", e)
        raise UpstreamError("Error during generation")
