"""Runtime configuration read from environment variables.

``.env`` is loaded by the package ``__init__`` before anything here runs.
``get_settings()`` reads ``os.environ`` on every call so tests can patch the
environment without reloading modules.
"""

import os
from dataclasses import dataclass


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    return float(value) if value else default


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if not value:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Application configuration values loaded from environment variables."""

    elasticsearch_url: str = "http://localhost:9200"
    elasticsearch_api_key: str | None = None
    accounts_index: str = "accounts"
    casts_index: str = "casts"
    snapshots_index: str = "shared_searches"
    notification_tokens_index: str = "notification_tokens"

    embedding_api_url: str = "https://api.deepinfra.com/v1/openai"
    embedding_api_key: str = ""
    embedding_model: str = "BAAI/bge-m3"
    embedding_timeout: float = 10.0

    llm_api_url: str = "https://api.deepseek.com/v1"
    llm_api_key: str = ""
    llm_model: str = "deepseek-chat"
    llm_temperature: float = 0.1
    llm_max_tokens: int = 8000
    llm_timeout: float = 30.0

    retrieval_timeout: float = 10.0
    account_score_threshold: float = 3.0
    account_limit: int = 5
    cast_similarity_threshold: float = 0.7
    cast_neighbours: int = 250

    # When a verdict omits ``isRelevant`` the candidate is kept.
    agent_treat_missing_as_relevant: bool = True


def get_settings() -> Settings:
    """Build a :class:`Settings` from the current environment."""
    defaults = Settings()
    return Settings(
        elasticsearch_url=os.environ.get("ELASTICSEARCH_URL", defaults.elasticsearch_url),
        elasticsearch_api_key=os.environ.get("ELASTICSEARCH_API_KEY") or None,
        accounts_index=os.environ.get("ACCOUNTS_INDEX", defaults.accounts_index),
        casts_index=os.environ.get("CASTS_INDEX", defaults.casts_index),
        snapshots_index=os.environ.get("SNAPSHOTS_INDEX", defaults.snapshots_index),
        notification_tokens_index=os.environ.get(
            "NOTIFICATION_TOKENS_INDEX", defaults.notification_tokens_index
        ),
        embedding_api_url=os.environ.get("EMBEDDING_API_URL", defaults.embedding_api_url),
        embedding_api_key=(
            os.environ.get("EMBEDDING_API_KEY") or os.environ.get("DEEPINFRA_API_KEY", "")
        ),
        embedding_model=os.environ.get("EMBEDDING_MODEL", defaults.embedding_model),
        embedding_timeout=_env_float("EMBEDDING_TIMEOUT", defaults.embedding_timeout),
        llm_api_url=os.environ.get("LLM_API_URL", defaults.llm_api_url),
        llm_api_key=os.environ.get("LLM_API_KEY") or os.environ.get("DEEPSEEK_API_KEY", ""),
        llm_model=os.environ.get("LLM_MODEL", defaults.llm_model),
        llm_temperature=_env_float("LLM_TEMPERATURE", defaults.llm_temperature),
        llm_max_tokens=_env_int("LLM_MAX_TOKENS", defaults.llm_max_tokens),
        llm_timeout=_env_float("LLM_TIMEOUT", defaults.llm_timeout),
        retrieval_timeout=_env_float("RETRIEVAL_TIMEOUT", defaults.retrieval_timeout),
        account_score_threshold=_env_float(
            "ACCOUNT_SCORE_THRESHOLD", defaults.account_score_threshold
        ),
        account_limit=_env_int("ACCOUNT_LIMIT", defaults.account_limit),
        cast_similarity_threshold=_env_float(
            "CAST_SIMILARITY_THRESHOLD", defaults.cast_similarity_threshold
        ),
        cast_neighbours=_env_int("CAST_NEIGHBOURS", defaults.cast_neighbours),
        agent_treat_missing_as_relevant=_env_bool(
            "AGENT_TREAT_MISSING_AS_RELEVANT", defaults.agent_treat_missing_as_relevant
        ),
    )
