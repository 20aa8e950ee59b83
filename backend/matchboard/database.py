"""
backend/matchboard/database.py

Purpose:
    Optional MongoDB connection bootstrap. The match list is mirrored into a
    single document so deployments without a writable disk keep their data.
    When MONGO_URI is empty the service runs on the JSON file alone.

Dependencies:
    - motor.motor_asyncio
    - matchboard.config
"""

from __future__ import annotations

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase

from matchboard.config import settings

logger = logging.getLogger("matchboard.database")

client: AsyncIOMotorClient | None = None
db: AsyncIOMotorDatabase | None = None

DOCUMENTS_COLLECTION = "documents"
MATCHES_DOCUMENT_ID = "matches"


async def connect_db() -> bool:
    """Connect when a URI is configured. Returns whether the mirror is active."""
    global client, db
    if not settings.MONGO_URI:
        logger.info("MONGO_URI not set, match data is stored in %s only", settings.MATCHES_FILE)
        return False
    client = AsyncIOMotorClient(
        settings.MONGO_URI,
        maxPoolSize=10,
        serverSelectionTimeoutMS=5000,
    )
    db = client[settings.MONGO_DB]
    logger.info("MongoDB mirror enabled (db=%s)", settings.MONGO_DB)
    return True


async def close_db() -> None:
    global client, db
    if client:
        client.close()
    client = None
    db = None


def get_documents_collection() -> AsyncIOMotorCollection | None:
    if db is None:
        return None
    return db[DOCUMENTS_COLLECTION]
