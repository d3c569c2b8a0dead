"""Celery application configuration."""

from functools import lru_cache

from celery import Celery
from celery.signals import worker_process_shutdown
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from src.config import get_settings
from src.database import create_db_engine, create_session_factory

settings = get_settings()

app = Celery(
    "pantry_tracker",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["src.tasks.receipt_scan"],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    task_soft_time_limit=240,  # 4 minutes soft limit
)


@lru_cache
def get_task_engine() -> Engine:
    """Engine for the worker process, created on first use."""
    return create_db_engine(settings.database_url)


@lru_cache
def get_task_session_factory() -> sessionmaker:
    """Session factory for the worker process."""
    return create_session_factory(get_task_engine())


@worker_process_shutdown.connect
def _dispose_engine(**kwargs) -> None:
    if get_task_engine.cache_info().currsize:
        get_task_engine().dispose()
