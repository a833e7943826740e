"""
Ollama client for portfolio diagnosis narratives.
Minimal client with timeout and options. Fail closed if model unavailable.
"""

import os
import json
import logging
import requests
from typing import Any, Dict, Optional
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'http://localhost:11434'
DEFAULT_MODEL = 'llama3.1:8b'


class OllamaError(Exception):
    """Base exception for Ollama client errors."""
    pass


class OllamaTimeoutError(OllamaError):
    """Raised when Ollama request times out."""
    pass


class OllamaUnavailableError(OllamaError):
    """Raised when Ollama service or model is unavailable."""
    pass


def ollama_settings() -> Dict[str, Any]:
    """
    Read Ollama settings from the environment.

    Returns:
        Dictionary with base_url, model, timeout and options

    Raises:
        OllamaError: If OLLAMA_OPTIONS_JSON or OLLAMA_TIMEOUT_S is malformed
    """
    options_json = os.getenv('OLLAMA_OPTIONS_JSON', '{}')
    try:
        options = json.loads(options_json) if options_json else {}
    except json.JSONDecodeError:
        raise OllamaError(f"Invalid OLLAMA_OPTIONS_JSON: {options_json}")

    try:
        timeout = int(os.getenv('OLLAMA_TIMEOUT_S', '60'))
    except ValueError:
        raise OllamaError(f"Invalid OLLAMA_TIMEOUT_S: {os.getenv('OLLAMA_TIMEOUT_S')}")

    return {
        'base_url': os.getenv('OLLAMA_BASE_URL', DEFAULT_BASE_URL),
        'model': os.getenv('OLLAMA_MODEL', DEFAULT_MODEL),
        'timeout': timeout,
        'options': options
    }


def ollama_request(
    prompt: str,
    system_prompt: str,
    model: Optional[str] = None,
    timeout: Optional[int] = None,
    options: Optional[Dict[str, Any]] = None
) -> str:
    """
    Make request to Ollama for text generation.

    Args:
        prompt: User prompt for the model
        system_prompt: System prompt for context
        model: Model name (defaults to env OLLAMA_MODEL)
        timeout: Request timeout in seconds (defaults to env OLLAMA_TIMEOUT_S)
        options: Model options (defaults to env OLLAMA_OPTIONS_JSON)

    Returns:
        Generated text response

    Raises:
        OllamaError: If request fails
        OllamaTimeoutError: If request times out
        OllamaUnavailableError: If service or model unavailable
    """
    settings = ollama_settings()
    base_url = settings['base_url']
    model = model or settings['model']
    timeout = timeout or settings['timeout']
    options = settings['options'] if options is None else options

    if not check_model_availability(model, base_url):
        raise OllamaUnavailableError(f"Model '{model}' is not pulled; run: ollama pull {model}")

    response = _post_generate(
        base_url,
        {
            'model': model,
            'prompt': prompt,
            'system': system_prompt,
            'stream': False,
            'options': options
        },
        timeout
    )
    generated_text = _extract_text(response)

    logger.debug(f"Ollama model {model} returned {len(generated_text)} characters")

    return generated_text


def _post_generate(base_url: str, payload: Dict[str, Any], timeout: int) -> requests.Response:
    """POST a non-streaming generate call, mapping transport failures to OllamaError."""
    url = f"{base_url.rstrip('/')}/api/generate"

    try:
        return requests.post(
            url,
            json=payload,
            timeout=timeout,
            headers={'Content-Type': 'application/json'}
        )
    except requests.exceptions.Timeout:
        raise OllamaTimeoutError(f"Diagnosis request timed out after {timeout}s")
    except requests.exceptions.ConnectionError:
        raise OllamaUnavailableError(f"Ollama service unavailable at {base_url} (is `ollama serve` running?)")
    except requests.exceptions.RequestException as e:
        raise OllamaError(f"Diagnosis request failed: {e}")


def _extract_text(response: requests.Response) -> str:
    """Generated text from a generate response (stripped, never empty)."""
    if response.status_code != 200:
        raise OllamaError(f"HTTP {response.status_code} from Ollama: {response.text}")

    try:
        body = response.json()
    except ValueError:
        raise OllamaError(f"Invalid JSON response from Ollama: {response.text}")

    if 'response' not in body:
        raise OllamaError(f"Missing 'response' field in Ollama reply: {body}")

    text = (body['response'] or '').strip()
    if not text:
        raise OllamaError("Empty response from model")

    return text


def check_model_availability(model: str, base_url: Optional[str] = None) -> bool:
    """
    Check if specified model is available in Ollama.

    Args:
        model: Model name to check
        base_url: Ollama base URL (defaults to env)

    Returns:
        True if model is available, False otherwise
    """
    if base_url is None:
        base_url = os.getenv('OLLAMA_BASE_URL', DEFAULT_BASE_URL)

    try:
        response = requests.get(f"{base_url.rstrip('/')}/api/tags", timeout=10)
    except requests.exceptions.RequestException as e:
        logger.debug(f"Ollama availability check failed: {e}")
        return False

    if response.status_code != 200:
        return False

    try:
        models = response.json().get('models', [])
    except ValueError:
        return False

    return any(m.get('name') == model for m in models)
