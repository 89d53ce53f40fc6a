import logging
from typing import Dict, List

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from hr_portal.core.config import settings
from hr_portal.core.exceptions import AIError, AIKillSwitchError

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((requests.exceptions.Timeout, requests.exceptions.ConnectionError)),
    reraise=True
)
def _post_completion(messages: List[Dict[str, str]], model_name: str, temperature: float) -> str:
    """Single completion call; transient network failures are retried."""
    logger.info(f"Calling AI Model: {model_name}")
    response = requests.post(
        OPENROUTER_URL,
        headers={
            "Authorization": f"Bearer {settings.ai.openrouter_api_key}",
            "Content-Type": "application/json",
        },
        json={
            "model": model_name,
            "messages": messages,
            "temperature": temperature,
        },
        timeout=30,
    )
    response.raise_for_status()
    return response.json()["choices"][0]["message"]["content"]


def call_openrouter(messages: List[Dict[str, str]], temperature: float = 0.7) -> str:
    """
    Call OpenRouter with the specified messages, falling back to the
    secondary model once if the primary fails.

    Args:
        messages: List of message dictionaries with 'role' and 'content'
        temperature: Temperature for the model (default 0.7)

    Returns:
        str: The AI response content

    Raises:
        AIKillSwitchError: If AI features are switched off.
        AIError: If the API key is missing or every model call failed.
    """
    if settings.ai.kill_switch:
        logger.warning("AI Kill-switch is active. Blocking request.")
        raise AIKillSwitchError()

    if not settings.ai.openrouter_api_key:
        logger.error("OpenRouter API Key missing.")
        raise AIError("AI service configuration error.")

    try:
        return _post_completion(messages, settings.ai.model_name, temperature)
    except (requests.exceptions.RequestException, KeyError, ValueError) as e:
        logger.warning(f"Primary model {settings.ai.model_name} failed: {e}. Attempting fallback.")

    try:
        return _post_completion(messages, settings.ai_fallback_model, temperature)
    except (requests.exceptions.RequestException, KeyError, ValueError) as e:
        logger.error(f"Fallback model {settings.ai_fallback_model} failed: {e}")
        raise AIError("AI service is temporarily unavailable. Please try again later.")
