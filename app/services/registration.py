"""
Registration config singleton — lazily created with defaults on first read.
"""

from __future__ import annotations

import logging
from typing import Any

from app.core.config import settings
from app.core.exceptions import RecordExistsError
from app.core.timeutils import now_ms
from app.db.store import APP_CONFIG, RecordStore
from app.models.registration_config import REGISTRATION_CONFIG_ID, RegistrationConfig

logger = logging.getLogger(__name__)


async def get_registration_config(store: RecordStore) -> RegistrationConfig:
    """Fetch the singleton config, creating it with defaults if absent."""
    config = await store.get_by_id(APP_CONFIG, REGISTRATION_CONFIG_ID)
    if config is not None:
        return config

    now = now_ms()
    try:
        await store.write_one(
            APP_CONFIG,
            REGISTRATION_CONFIG_ID,
            {
                "registration_url": settings.DEFAULT_REGISTRATION_URL,
                "whatsapp_help_url": settings.DEFAULT_WHATSAPP_HELP_URL,
                "is_active": True,
                "description": "Default registration link",
                "created_at": now,
                "updated_at": now,
                "updated_by": "",
            },
        )
        logger.info("Created default registration config")
    except RecordExistsError:
        logger.debug("Registration config created concurrently, re-reading")
    return await store.get_by_id(APP_CONFIG, REGISTRATION_CONFIG_ID)


async def update_registration_config(
    store: RecordStore,
    changes: dict[str, Any],
    updated_by: str,
) -> RegistrationConfig:
    await get_registration_config(store)
    config = await store.update_one(
        APP_CONFIG,
        REGISTRATION_CONFIG_ID,
        {**changes, "updated_at": now_ms(), "updated_by": updated_by},
    )
    logger.info("Registration config updated by %s: %s", updated_by, sorted(changes))
    return config
