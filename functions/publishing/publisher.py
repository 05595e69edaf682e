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
Publish flow for news and events.

RECEIVED -> VALIDATED -> URL_CHECKED -> ID_ALLOCATED -> WRITTEN. The id is
allocated and the item written in the same store transaction, so the last
two states are reached together or not at all.
"""

import logging
from typing import Callable, List

from publishing import article_writer
from publishing.errors import UnsafeLink, ValidationFailed
from publishing.store import PublishStore
from publishing.url_safety import check_url_safety
from publishing.validation import validate_event_inputs, validate_news_inputs
from shared.config import Settings, get_settings
from shared.constants import (
    EVENTS_COUNTER_PATH,
    EVENTS_ITEMS_PATH,
    NEWS_COUNTER_PATH,
    NEWS_ITEMS_PATH,
)
from shared.types import (
    EventSubmission,
    FieldError,
    NewsSubmission,
    PublishEventResult,
    PublishNewsResult,
    PublishState,
)

logger = logging.getLogger(__name__)


class _PublishFlow:
    """Tracks and logs the state of one publish call."""

    def __init__(self, kind: str, uid: str):
        self.kind = kind
        self.uid = uid
        self.state = PublishState.RECEIVED
        self._log()

    def advance(self, state: PublishState) -> None:
        self.state = state
        self._log()

    def fail(self, reason: str) -> None:
        logger.info(
            f"[{self.kind} publish] failed in state {self.state} for {self.uid}: {reason}"
        )
        self.state = PublishState.FAILED

    def _log(self) -> None:
        logger.debug(f"[{self.kind} publish] {self.uid}: {self.state}")


def _run(
    flow: _PublishFlow,
    errors: List[FieldError],
    link,
    settings: Settings,
    allocate: Callable[[], int],
) -> int:
    if errors:
        flow.fail("validation")
        raise ValidationFailed(errors)
    flow.advance(PublishState.VALIDATED)

    url_check = check_url_safety(
        link if isinstance(link, str) else None,
        deny_list=settings.deny_list,
        fail_open=settings.url_check_fail_open,
    )
    if not url_check.safe:
        flow.fail(url_check.reason or "unsafe link")
        raise UnsafeLink(url_check.reason or "Unsafe link")
    flow.advance(PublishState.URL_CHECKED)

    try:
        item_id = allocate()
    except Exception as e:
        flow.fail(str(e))
        raise
    flow.advance(PublishState.ID_ALLOCATED)
    flow.advance(PublishState.WRITTEN)
    return item_id


def publish_news(
    store: PublishStore,
    uid: str,
    submission: NewsSubmission,
    settings: Settings | None = None,
) -> PublishNewsResult:
    """
    Validates a news submission, checks its link and stores it under the
    next sequential news id.

    Args:
        store (PublishStore): Where the counter and the article live.
        uid (str): The authorized caller, recorded as `createdBy`.
        submission (NewsSubmission): The client payload.
        settings (Settings): Defaults to the environment settings.

    Returns:
        PublishNewsResult: The allocated id.

    Raises:
        ValidationFailed: With every field error found.
        UnsafeLink: If the link is on the deny-list.
        AllocationConflict: If the transaction lost to concurrent writers.
        PersistenceError: For other storage failures.
    """
    settings = settings or get_settings()
    flow = _PublishFlow("News", uid)
    news_id = _run(
        flow,
        validate_news_inputs(submission),
        submission.link,
        settings,
        lambda: store.allocate_and_write(
            NEWS_COUNTER_PATH,
            NEWS_ITEMS_PATH,
            lambda new_id: article_writer.build_news_document(new_id, submission, uid),
        ),
    )
    logger.info(f"[News Publish] Successfully created news #{news_id} by user {uid}")
    return PublishNewsResult(news_id=news_id)


def publish_event(
    store: PublishStore,
    uid: str,
    submission: EventSubmission,
    settings: Settings | None = None,
) -> PublishEventResult:
    """Same flow as `publish_news`, for events."""
    settings = settings or get_settings()
    flow = _PublishFlow("Event", uid)
    event_id = _run(
        flow,
        validate_event_inputs(submission),
        submission.link,
        settings,
        lambda: store.allocate_and_write(
            EVENTS_COUNTER_PATH,
            EVENTS_ITEMS_PATH,
            lambda new_id: article_writer.build_event_document(
                new_id, submission, uid
            ),
        ),
    )
    logger.info(f"[Event Publish] Successfully created event #{event_id} by user {uid}")
    return PublishEventResult(event_id=event_id)
