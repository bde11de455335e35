"""
FitBot AI - application wiring.
"""

import logging
import random
from typing import Optional

from .agents import ConversationAdapter
from .config import Settings, settings as default_settings
from .core import SessionManager
from .core.logging_config import filter_sensitive_data, setup_logging
from .llm import create_llm_provider
from .storage import LocalStorage, init_local_store

logger = logging.getLogger(__name__)


def create_adapter(config: Settings) -> ConversationAdapter:
    """Build the conversation adapter; without an API key it is left unconfigured."""
    provider = create_llm_provider(
        provider=config.llm_provider,
        api_key=config.resolved_api_key,
        model=config.llm_model,
        base_url=config.llm_base_url,
        timeout=config.llm_timeout,
        default_temperature=config.llm_temperature,
    )
    if provider is None:
        logger.warning("API key is missing. The coach cannot reply until LLM_API_KEY is set.")
    elif config.log_llm_calls:
        logger.info(f"LLM provider configured: {filter_sensitive_data(provider.describe())}")
    return ConversationAdapter(provider, temperature=config.llm_temperature)


def create_app(config: Optional[Settings] = None, rng: Optional[random.Random] = None) -> SessionManager:
    """
    Set up logging and storage and return the application root.

    Call ``await app.initialize()`` on the result to restore the last state.
    """
    config = config or default_settings
    setup_logging(config)

    store = init_local_store(LocalStorage(config.local_storage_path))
    app = SessionManager(store, create_adapter(config), rng=rng)

    logger.info(f"Starting {config.app_name} v{config.app_version}")
    logger.info(f"Storage path: {config.local_storage_path}")
    logger.info(f"Log level: {config.log_level.upper()}")
    return app
