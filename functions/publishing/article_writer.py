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
"""Builds and writes the stored documents for published items."""

from typing import Any

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from publishing.store import PublishStore
from publishing.validation import parse_date
from shared.types import EventSubmission, NewsSubmission


def _clean(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def resolve_display_date(custom_date: Any):
    """
    Returns the date shown for a news article.

    A parseable `customDate` (e.g. "2025-03-14") wins; anything else falls
    back to the server timestamp.
    """
    parsed = parse_date(custom_date)
    return parsed if parsed is not None else SERVER_TIMESTAMP


def build_news_document(
    news_id: int, submission: NewsSubmission, created_by: str
) -> dict:
    """Returns the Firestore document for a validated news submission."""
    return {
        "id": news_id,
        "title": _clean(submission.title),
        "author": _clean(submission.author),
        "desc": _clean(submission.body),
        "link": _clean(submission.link),
        "image": _clean(submission.image_url),
        "date": resolve_display_date(submission.custom_date),
        "createdAt": SERVER_TIMESTAMP,
        "hubExclusive": False,
        "createdBy": created_by,
    }


def build_event_document(
    event_id: int, submission: EventSubmission, created_by: str
) -> dict:
    """Returns the Firestore document for a validated event submission."""
    return {
        "id": event_id,
        "title": _clean(submission.title),
        "place": _clean(submission.place),
        "description": _clean(submission.description),
        "link": _clean(submission.link),
        "image": _clean(submission.image_url),
        "date-from": parse_date(submission.date_from),
        "date-to": parse_date(submission.date_to),
        "createdAt": SERVER_TIMESTAMP,
        "createdBy": created_by,
    }


def write_article(
    store: PublishStore, items_path: str, article_id: int, document: dict
) -> None:
    """
    Writes `document` at `article_id`, replacing whatever is stored there.

    Writing the same document under the same id again leaves storage
    unchanged. A new id always comes from the allocator.
    """
    if article_id < 1:
        raise ValueError(f"Invalid article id: {article_id}")
    store.write_item(items_path, article_id, {**document, "id": article_id})
