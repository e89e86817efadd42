"""Backend communication for Ollama and LM Studio."""

import requests


def call_ollama(messages: list[dict], config, temperature: float = 0.0, max_tokens: int | None = None) -> str:
    """Call Ollama chat and return the assistant message content."""
    endpoint = f"{config.OLLAMA_ENDPOINT}/api/chat"

    options = {"temperature": temperature}
    if max_tokens:
        options["num_predict"] = max_tokens

    payload = {
        "model": config.BACKEND_MODEL,
        "messages": messages,
        "stream": False,
        "options": options,
    }

    # Set timeout as tuple (connect_timeout, read_timeout)
    timeout = (config.BACKEND_CONNECT_TIMEOUT, config.BACKEND_READ_TIMEOUT)

    response = requests.post(endpoint, json=payload, timeout=timeout)
    response.raise_for_status()
    return response.json().get("message", {}).get("content", "")


def call_lmstudio(messages: list[dict], config, temperature: float = 0.0, max_tokens: int | None = None) -> str:
    """Call LM Studio (OpenAI-compatible) chat completions and return the content."""
    endpoint = f"{config.LMSTUDIO_ENDPOINT}/chat/completions"

    payload = {
        "model": config.BACKEND_MODEL,
        "messages": messages,
        "temperature": temperature,
        "stream": False,
    }
    if max_tokens:
        payload["max_tokens"] = max_tokens

    # Set timeout as tuple (connect_timeout, read_timeout)
    timeout = (config.BACKEND_CONNECT_TIMEOUT, config.BACKEND_READ_TIMEOUT)

    response = requests.post(endpoint, json=payload, timeout=timeout)
    response.raise_for_status()
    choices = response.json().get("choices") or [{}]
    return choices[0].get("message", {}).get("content", "")


def call_backend(messages: list[dict], config, temperature: float = 0.0, max_tokens: int | None = None) -> str:
    """Call the configured backend."""
    if config.BACKEND_TYPE == "ollama":
        return call_ollama(messages, config, temperature, max_tokens)
    else:  # lmstudio
        return call_lmstudio(messages, config, temperature, max_tokens)


def check_backend_health(config) -> tuple[bool, str]:
    """Check whether the configured backend is reachable.

    Args:
        config: ServerConfig instance

    Returns:
        (is_healthy, message)
    """
    if config.BACKEND_TYPE == "ollama":
        name = "Ollama"
        endpoint = f"{config.OLLAMA_ENDPOINT}/api/tags"
    else:
        name = "LM Studio"
        endpoint = f"{config.LMSTUDIO_ENDPOINT}/models"

    timeout = config.HEALTH_CHECK_TIMEOUT
    try:
        response = requests.get(endpoint, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.Timeout:
        return False, f"{name} health check timed out after {timeout}s. Backend may be unresponsive."
    except requests.ConnectionError:
        return False, f"Cannot connect to {name} at {endpoint}. Is it running?"
    except Exception as e:
        return False, f"{name} health check failed: {e!s}"

    if config.BACKEND_TYPE == "ollama":
        model_names = [model.get("name", "") for model in data.get("models", [])]
        if config.BACKEND_MODEL in model_names:
            return True, f"Ollama is healthy. Model '{config.BACKEND_MODEL}' is available."
        available = ", ".join(model_names) if model_names else "none"
        return False, f"Ollama is reachable but model '{config.BACKEND_MODEL}' not found. Available models: {available}"

    model_ids = [model.get("id", "") for model in data.get("data", [])]
    if model_ids:
        return True, f"LM Studio is healthy. {len(model_ids)} model(s) loaded: {', '.join(model_ids)}"
    return False, "LM Studio is reachable but no models are loaded. Please load a model in LM Studio."
