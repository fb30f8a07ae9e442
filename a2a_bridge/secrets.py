"""Secret lookup for MCP server config: OS keyring first, then environment."""

import asyncio
import logging
import os

import keyring
from keyring.errors import KeyringError

logger = logging.getLogger(__name__)
SERVICE_NAME = "a2a-bridge"


async def get_secret(name: str) -> str | None:
    """Resolve secret: keyring (off the event loop) -> os.environ."""
    try:
        value = await asyncio.to_thread(keyring.get_password, SERVICE_NAME, name)
        if value:
            return value
    except KeyringError:
        logger.debug("keyring lookup failed for %s, falling back to env", name)
    return os.environ.get(name)
