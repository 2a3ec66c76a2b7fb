"""
Shared Redis client bootstrap
Supports a single REDIS_URL or individual REDIS_HOST / REDIS_PORT settings
"""

import logging
import os
from typing import Optional

import redis

from .config import REDIS_ENABLED

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None


def _mask_url(redis_url: str) -> str:
    if "@" in redis_url:
        url_parts = redis_url.split("@")
        protocol = url_parts[0].split(":")[0]
        return f"{protocol}:****@{url_parts[1]}"
    return "****"


def get_redis_client() -> redis.Redis:
    """
    Get or create the shared Redis client.
    Raises when Redis is disabled or unreachable; callers decide how to degrade.
    """
    global redis_client

    if not REDIS_ENABLED:
        raise RuntimeError("Redis is disabled (REDIS_ENABLED=false)")

    if redis_client is None:
        logger.info("Initializing Redis connection...")
        common = {
            "decode_responses": True,
            "socket_connect_timeout": 5,
            "socket_timeout": 10,
            "retry_on_timeout": True,
            "health_check_interval": 30,
        }

        redis_url = os.getenv("REDIS_URL")
        if redis_url:
            logger.info(f"Using Redis URL connection: {_mask_url(redis_url)}")
            client = redis.from_url(redis_url, max_connections=20, **common)
        else:
            redis_host = os.getenv("REDIS_HOST", "localhost")
            redis_port = int(os.getenv("REDIS_PORT", "6379"))
            redis_password = os.getenv("REDIS_PASSWORD", None)
            redis_db = int(os.getenv("REDIS_DB", "0"))
            redis_ssl = os.getenv("REDIS_SSL", "false").lower() == "true"

            logger.info(
                f"Using Redis at {redis_host}:{redis_port} db={redis_db} "
                f"ssl={'on' if redis_ssl else 'off'} password={'set' if redis_password else 'not set'}"
            )
            client = redis.Redis(
                host=redis_host,
                port=redis_port,
                password=redis_password,
                db=redis_db,
                ssl=redis_ssl,
                **common,
            )

        try:
            client.ping()
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise
        redis_client = client
        logger.info("Redis connected successfully")

    return redis_client


def reset_redis_client() -> None:
    """Drop the cached client so the next call reconnects"""
    global redis_client
    if redis_client is not None:
        try:
            redis_client.close()
        except Exception as e:
            logger.warning(f"Error closing Redis client: {e}")
    redis_client = None
