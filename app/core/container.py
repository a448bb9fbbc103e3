"""Dependency Injection Container.

This module provides a centralized DI container using dependency-injector.
Lifecycles:
- Singleton: One instance for the entire application (clients, caches, limiter)
- Factory: New instance every time (services)

Usage:
    # In FastAPI
    from app.core.container import get_run_coordinator

    @router.post("/generate-content")
    async def generate(coordinator: RunCoordinator = Depends(get_run_coordinator)):
        ...

    # In Celery
    from app.core.container import container

    @celery_app.task
    def my_task():
        coordinator = container.services.run_coordinator()
        ...

    # In tests
    with container.services.run_coordinator.override(fake_coordinator):
        ...
"""

from dependency_injector import containers, providers
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import Config, get_config


class InfrastructureContainer(containers.DeclarativeContainer):
    """Infrastructure layer dependencies (database, external clients, storage).

    These are Singleton: one connection pool, one token cache, one limiter.
    """

    global_config = providers.Dependency(instance_of=Config)
    configs = providers.DependenciesContainer()

    # ============================================
    # Database
    # ============================================

    db_engine = providers.Singleton(
        create_async_engine,
        url=global_config.provided.database_url,
        echo=global_config.provided.database_echo,
        pool_pre_ping=True,
        pool_size=global_config.provided.database_pool_size,
        max_overflow=global_config.provided.database_max_overflow,
    )

    db_session_factory = providers.Singleton(
        async_sessionmaker,
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    # ============================================
    # HTTP Client
    # ============================================

    http_client = providers.Singleton(
        "app.infrastructure.http_client.HTTPClient",
        timeout=60.0,
    )

    # ============================================
    # LLM Client
    # ============================================

    # Unified LLM client (LiteLLM-based, provider-agnostic)
    llm_client = providers.Singleton(
        "app.infrastructure.llm.LLMClient",
        api_key=global_config.provided.gemini_api_key,
    )

    # ============================================
    # Speech Synthesis Auth
    # ============================================

    tts_token_provider = providers.Singleton(
        "app.infrastructure.google_auth.ServiceAccountTokenProvider",
        credentials_json=global_config.provided.google_tts_credentials,
        http_client=http_client,
    )

    tts_token_cache = providers.Singleton(
        "app.infrastructure.google_auth.AccessTokenCache",
        fetch_token=tts_token_provider.provided.fetch,
    )

    # Shared by every synthesis call in the process
    tts_rate_limiter = providers.Singleton(
        "app.core.rate_limiter.RateLimiter",
        requests_per_minute=configs.generation_config.provided.rate_limit.requests_per_minute,
        safety_buffer=configs.generation_config.provided.rate_limit.safety_buffer,
    )

    # ============================================
    # Audio Storage
    # ============================================

    audio_storage = providers.Singleton(
        "app.infrastructure.storage.create_audio_storage",
        config=global_config,
    )


class ConfigContainer(containers.DeclarativeContainer):
    """Configuration models container.

    Provides typed Pydantic config models for services.
    Configs are Singleton by default - loaded once and reused.
    """

    generation_config = providers.Singleton(
        "app.config.generation.GenerationConfig",
    )

    tts_voice_config = providers.Singleton(
        "app.config.tts.TTSVoiceConfig",
    )


class ServiceContainer(containers.DeclarativeContainer):
    """Service layer dependencies.

    Services are Factory; they receive infrastructure dependencies via injection.
    """

    global_config = providers.Dependency(instance_of=Config)
    infrastructure = providers.DependenciesContainer()
    configs = providers.DependenciesContainer()

    # ============================================
    # Prompts
    # ============================================

    prompt_manager = providers.Singleton(
        "app.prompts.manager.PromptManager",
    )

    # ============================================
    # Generation Services
    # ============================================

    content_generator = providers.Factory(
        "app.services.generator.content.ContentGenerator",
        llm_client=infrastructure.llm_client,
        prompt_manager=prompt_manager,
        config=configs.generation_config,
        model=global_config.provided.llm_model_content,
        timeout=global_config.provided.llm_timeout,
    )

    tts_engine = providers.Singleton(
        "app.services.generator.tts.gemini.GeminiTTSEngine",
        http_client=infrastructure.http_client,
        token_cache=infrastructure.tts_token_cache,
        endpoint=global_config.provided.tts_endpoint,
        model_name=global_config.provided.tts_model_name,
        language_code=global_config.provided.tts_language_code,
        audio_encoding=global_config.provided.tts_audio_encoding,
    )

    audio_synthesizer = providers.Factory(
        "app.services.generator.audio.AudioSynthesizer",
        engine=tts_engine,
        rate_limiter=infrastructure.tts_rate_limiter,
        voice_config=configs.tts_voice_config,
        retry_config=configs.generation_config.provided.tts_retry,
    )

    # ============================================
    # Storage Services
    # ============================================

    lesson_store = providers.Factory(
        "app.services.storage.lesson_store.LessonStore",
        db_session_factory=infrastructure.db_session_factory,
    )

    lesson_transaction = providers.Factory(
        "app.services.storage.transaction.LessonTransaction",
        store=lesson_store,
        storage=infrastructure.audio_storage,
    )

    # ============================================
    # Pipeline
    # ============================================

    run_coordinator = providers.Factory(
        "app.services.pipeline.coordinator.RunCoordinator",
        store=lesson_store,
        content_generator=content_generator,
        audio_synthesizer=audio_synthesizer,
        transaction=lesson_transaction,
        config=configs.generation_config,
        default_languages=global_config.provided.translation_languages,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Root application container.

    Composes all sub-containers and provides the main entry point.
    """

    # Global Config singleton (environment variables)
    # Uses get_config() to ensure same instance across the app
    config = providers.Singleton(get_config)

    # Sub-containers
    configs = providers.Container(
        ConfigContainer,
    )

    infrastructure = providers.Container(
        InfrastructureContainer,
        global_config=config,
        configs=configs,
    )

    services = providers.Container(
        ServiceContainer,
        global_config=config,
        infrastructure=infrastructure,
        configs=configs,
    )


def create_container() -> ApplicationContainer:
    """Create and configure the application container.

    Returns:
        Configured ApplicationContainer instance
    """
    return ApplicationContainer()


# Global container instance
container = create_container()


# ============================================
# FastAPI Integration
# ============================================


def get_container() -> ApplicationContainer:
    """Get the global container (for FastAPI Depends)."""
    return container


def get_run_coordinator():
    """FastAPI dependency for the run coordinator."""
    return container.services.run_coordinator()


async def close_container_resources() -> None:
    """Release resources held by singletons and drop the instances.

    The HTTP pool and the DB engine are bound to the running event loop;
    resetting the singletons lets the next loop (e.g. the next Celery task
    run under ``asyncio.run``) build fresh ones.
    """
    http_client = container.infrastructure.http_client()
    await http_client.close()
    engine = container.infrastructure.db_engine()
    await engine.dispose()
    container.reset_singletons()


__all__ = [
    "ApplicationContainer",
    "ConfigContainer",
    "InfrastructureContainer",
    "ServiceContainer",
    "close_container_resources",
    "container",
    "create_container",
    "get_config",
    "get_container",
    "get_run_coordinator",
]
