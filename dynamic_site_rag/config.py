"""Base configuration for answer generation and logging."""

from typing import Literal, Optional


class ServerConfig:
    """Configuration for the LLM backend used to answer queries.

    Projects should subclass this and override as needed.
    """

    # Backend configuration
    BACKEND_TYPE: Literal["lmstudio", "ollama"] = "lmstudio"
    BACKEND_MODEL: str = "openai/gpt-oss-20b"

    # Backend endpoints
    LMSTUDIO_ENDPOINT: str = "http://localhost:1234/v1"
    OLLAMA_ENDPOINT: str = "http://localhost:11434"

    # Generation settings
    DEFAULT_TEMPERATURE: float = 0.0
    MAX_RESPONSE_TOKENS: int = 1000

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None  # Also log to this file when set
    DEBUG_LOG_MAX_BYTES: int = 10 * 1024 * 1024  # 10MB default
    DEBUG_LOG_BACKUP_COUNT: int = 5  # Keep 5 backup files

    # Backend timeout settings (in seconds)
    BACKEND_CONNECT_TIMEOUT: int = 10  # Connection timeout
    BACKEND_READ_TIMEOUT: int = 300  # Read timeout (5 minutes for long completions)

    # Health check settings
    HEALTH_CHECK_TIMEOUT: int = 5  # Timeout for health check requests (in seconds)

    # Retry settings for backend calls
    BACKEND_RETRY_ATTEMPTS: int = 3  # Number of retry attempts for connection errors
    BACKEND_RETRY_INITIAL_DELAY: float = 1.0  # Initial delay in seconds (doubles each retry)

    @classmethod
    def from_env(cls, env_prefix: str = ""):
        """Create config from environment variables with optional prefix.

        Args:
            env_prefix: Prefix for environment variables (e.g., "SITE_RAG_")

        Returns:
            ServerConfig instance populated from environment
        """
        import os

        from dotenv import load_dotenv

        load_dotenv()

        config = cls()

        # Helper to get env var with prefix
        def get_env(name: str, default):
            # Try with prefix first, then without
            prefixed = os.getenv(f"{env_prefix}{name}", None)
            if prefixed is not None:
                return prefixed
            return os.getenv(name, default)

        # Load configuration from environment
        config.BACKEND_TYPE = get_env("BACKEND", cls.BACKEND_TYPE)
        config.BACKEND_MODEL = get_env("BACKEND_MODEL", cls.BACKEND_MODEL)
        config.LMSTUDIO_ENDPOINT = get_env("LMSTUDIO_ENDPOINT", cls.LMSTUDIO_ENDPOINT)
        config.OLLAMA_ENDPOINT = get_env("OLLAMA_ENDPOINT", cls.OLLAMA_ENDPOINT)
        config.DEFAULT_TEMPERATURE = float(get_env("TEMPERATURE", str(cls.DEFAULT_TEMPERATURE)))
        config.MAX_RESPONSE_TOKENS = int(get_env("MAX_RESPONSE_TOKENS", str(cls.MAX_RESPONSE_TOKENS)))
        config.LOG_LEVEL = get_env("LOG_LEVEL", cls.LOG_LEVEL).upper()
        config.LOG_FILE = get_env("LOG_FILE", cls.LOG_FILE) or None
        config.DEBUG_LOG_MAX_BYTES = int(get_env("DEBUG_LOG_MAX_BYTES", str(cls.DEBUG_LOG_MAX_BYTES)))
        config.DEBUG_LOG_BACKUP_COUNT = int(get_env("DEBUG_LOG_BACKUP_COUNT", str(cls.DEBUG_LOG_BACKUP_COUNT)))
        config.BACKEND_CONNECT_TIMEOUT = int(get_env("BACKEND_CONNECT_TIMEOUT", str(cls.BACKEND_CONNECT_TIMEOUT)))
        config.BACKEND_READ_TIMEOUT = int(get_env("BACKEND_READ_TIMEOUT", str(cls.BACKEND_READ_TIMEOUT)))
        config.HEALTH_CHECK_TIMEOUT = int(get_env("HEALTH_CHECK_TIMEOUT", str(cls.HEALTH_CHECK_TIMEOUT)))
        config.BACKEND_RETRY_ATTEMPTS = int(get_env("BACKEND_RETRY_ATTEMPTS", str(cls.BACKEND_RETRY_ATTEMPTS)))
        config.BACKEND_RETRY_INITIAL_DELAY = float(
            get_env("BACKEND_RETRY_INITIAL_DELAY", str(cls.BACKEND_RETRY_INITIAL_DELAY))
        )

        return config
