# Copyright 2025 Google LLC
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
# ==============================================================================
"""
Environment-backed configuration for the publishing functions.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Any, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from shared.constants import (
    DEFAULT_BLACKLISTED_DOMAINS,
    DEFAULT_REGION,
    UPLOAD_URL_EXPIRY_SECONDS,
)


class Settings(BaseSettings):
    """Settings read from the environment (prefix HUB_) or a local .env file."""

    model_config = SettingsConfigDict(
        env_prefix="HUB_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    function_region: str = Field(default=DEFAULT_REGION)

    # When a link cannot be parsed, allow publishing (True) or reject it.
    url_check_fail_open: bool = Field(default=True)
    # Extra domains appended to the built-in deny-list. From the environment
    # either comma separated (a.com,b.com) or a JSON list.
    blacklisted_domains: Annotated[List[str], NoDecode] = Field(default_factory=list)

    upload_url_expiry_seconds: int = Field(default=UPLOAD_URL_EXPIRY_SECONDS, gt=0)
    transaction_max_attempts: int = Field(default=5, ge=1)

    # Local development without a Firestore emulator.
    use_in_memory_store: bool = Field(default=False)

    @field_validator("blacklisted_domains", mode="before")
    @classmethod
    def _split_domains(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        text = value.strip()
        if text.startswith("["):
            return json.loads(text)
        return [domain.strip() for domain in text.split(",") if domain.strip()]

    @property
    def deny_list(self) -> tuple[str, ...]:
        extra = tuple(
            domain.strip().lower()
            for domain in self.blacklisted_domains
            if domain and domain.strip()
        )
        return DEFAULT_BLACKLISTED_DOMAINS + extra


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
