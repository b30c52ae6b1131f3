"""Shared bootstrap for the pipeline entry points."""

import logging
import random
import sys
from pathlib import Path
from typing import Callable, Optional

from dotenv import load_dotenv

from career_graph.cache_store import CacheStore
from career_graph.config import CacheConfig, LLMConfig
from career_graph.db.database import get_database
from career_graph.exceptions import ConfigurationError
from career_graph.pipeline import PipelineOrchestrator
from career_graph.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def load_settings(provider: bool = True, env_file: str = ".env") -> Settings:
    """Load .env from the working directory and the environment, failing fast
    on missing configuration."""
    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(env_path)
    get_settings.cache_clear()
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
    return settings.require(provider=provider)


def build_orchestrator(settings: Settings, seed: Optional[int] = None) -> PipelineOrchestrator:
    """Wire store, cache, provider config and random source from settings."""
    database = get_database(settings.database_url, echo=settings.database_echo)
    seed = seed if seed is not None else settings.random_seed
    if seed is not None:
        logger.info(f"Sampling with seed {seed}")
    return PipelineOrchestrator(
        database,
        cache=CacheStore(CacheConfig(cache_dir=Path(settings.cache_dir))),
        llm_config=LLMConfig.from_settings(settings),
        rng=random.Random(seed),
        strict_references=settings.strict_references,
    )


def run_entry_point(main: Callable[[], None], description: str) -> None:
    """Run main() and exit 1 on configuration or unhandled errors."""
    try:
        main()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error(f"{description} aborted: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"{description} failed: {e}", exc_info=True)
        sys.exit(1)


def run_stages(stages, description: str, seed: Optional[int] = None) -> None:
    """Run the given stages unconditionally."""
    settings = load_settings()
    orchestrator = build_orchestrator(settings, seed=seed)
    try:
        for stage in stages:
            result = orchestrator.run_stage(stage)
            logger.info(f"{description}: {stage} -> {result}")
    finally:
        orchestrator.database.dispose()
