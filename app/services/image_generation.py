"""
Client for the Hugging Face Inference API (Stable Diffusion XL).
Single attempt per call; the caller decides what to tell the user.
"""
import logging
from typing import Optional
import requests
from app.core.exceptions import UpstreamError, UpstreamTransientError

logger = logging.getLogger(__name__)

HUGGINGFACE_MODEL_URL = "https://api-inference.huggingface.co/models/stabilityai/stable-diffusion-xl-base-1.0"
GENERATION_TIMEOUT_SECONDS = 60
DEFAULT_RETRY_AFTER_SECONDS = 20
MODEL_LOADING_MESSAGE = "The AI model is loading, please try again in {seconds} seconds"


def build_prompt(prompt: str, style: str, room_type: Optional[str]) -> str:
    """Compose the instruction sent to the model. The room type is optional."""
    parts = [f"{style} interior design"]
    if room_type and room_type.strip():
        parts.append(room_type.strip())
    parts.extend([prompt, "high quality, professional, 4k"])
    return ", ".join(parts)


def _retry_after(response: requests.Response) -> int:
    """Seconds to wait, from the service's estimated_time when it sends one."""
    try:
        estimated = response.json().get("estimated_time")
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS
    if isinstance(estimated, (int, float)) and estimated > 0:
        return int(round(estimated))
    return DEFAULT_RETRY_AFTER_SECONDS


def generate_image(full_prompt: str, api_key: Optional[str]) -> bytes:
    """
    Generate an image and return its raw bytes.
    Raises UpstreamTransientError while the model is warming up (HTTP 503),
    UpstreamError for anything else that goes wrong.
    """
    try:
        response = requests.post(
            HUGGINGFACE_MODEL_URL,
            json={"inputs": full_prompt},
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=GENERATION_TIMEOUT_SECONDS,
        )
    except requests.exceptions.RequestException as e:
        logger.error("Hugging Face request failed: %s", e)
        raise UpstreamError("Error during generation")

    if response.status_code == 503:
        seconds = _retry_after(response)
        logger.warning("Hugging Face model loading, retry in %ss", seconds)
        raise UpstreamTransientError(MODEL_LOADING_MESSAGE.format(seconds=seconds), retry_after=seconds)

    if response.status_code != 200:
        logger.error("Hugging Face returned %s: %s", response.status_code, response.text[:200])
        raise UpstreamError("Error during generation")

    return response.content
