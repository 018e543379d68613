# Copyright 2024 Heinrich Krupp
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Substrate factory for the quote memory service.

Creates a Redis store when a URL is configured, otherwise the in-process one.
"""

import logging

from ..config import RedisSettings
from .base import KeyValueStore
from .memory_store import InMemoryKeyValueStore
from .redis_store import RedisKeyValueStore

logger = logging.getLogger(__name__)


def create_store_instance(settings: RedisSettings | None = None) -> KeyValueStore:
    """
    Create (but do not initialize) the configured key-value substrate.

    The engine's ``initialize()`` opens it, bounded by the startup timeout.

    Returns:
        RedisKeyValueStore or InMemoryKeyValueStore
    """
    settings = settings or RedisSettings()

    if settings.url:
        store = RedisKeyValueStore(
            url=settings.url,
            key_prefix=settings.key_prefix,
            max_connections=settings.max_connections,
        )
        logger.info(f"Created Redis substrate: {settings.url}")
        return store

    logger.info("No Redis URL configured; using in-process substrate")
    return InMemoryKeyValueStore()
