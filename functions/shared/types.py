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

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Optional


class PublishState(StrEnum):
    """Stages of a single publish call."""

    RECEIVED = "RECEIVED"
    VALIDATED = "VALIDATED"
    URL_CHECKED = "URL_CHECKED"
    ID_ALLOCATED = "ID_ALLOCATED"
    WRITTEN = "WRITTEN"
    FAILED = "FAILED"


@dataclass
class NewsSubmission:
    """Client payload for publishing a news article.

    Fields are left as Any: payloads are parsed without type checks and the
    validator reports values of the wrong type.
    """

    title: Any = None
    author: Any = None
    desc: Any = None
    description: Any = None
    link: Any = None
    image_url: Any = None
    custom_date: Any = None

    @property
    def body(self) -> Any:
        """The description, accepting both the `desc` and `description` keys."""
        return self.desc if self.desc is not None else self.description


@dataclass
class EventSubmission:
    """Client payload for publishing an event."""

    title: Any = None
    place: Any = None
    description: Any = None
    link: Any = None
    image_url: Any = None
    date_from: Any = None
    date_to: Any = None


@dataclass
class UploadUrlRequest:
    content_type: Any = None
    news_id: Any = None
    event_id: Any = None


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass(frozen=True)
class UrlCheckResult:
    safe: bool
    checked: bool
    reason: Optional[str] = None
    warning: Optional[str] = None


@dataclass
class PublishNewsResult:
    news_id: int
    success: bool = True
    message: str = "News published successfully"


@dataclass
class PublishEventResult:
    event_id: int
    success: bool = True
    message: str = "Event published successfully"


@dataclass
class UploadUrlResult:
    upload_url: str
    file_name: str
    expires_in: int
