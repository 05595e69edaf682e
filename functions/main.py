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

# Cloud functions for the Hub home page - news and event publishing.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Standard library imports
from dataclasses import asdict
from typing import Type, TypeVar

# Third-party library imports
from dacite import from_dict, Config
from firebase_admin import initialize_app, storage
from firebase_functions import https_fn, logger, options

# Local application imports
from publishing import publisher, uploads
from publishing.auth import require_staff
from publishing.errors import (
    AllocationConflict,
    InvalidRequest,
    PermissionDenied,
    PersistenceError,
    PublishError,
    Unauthenticated,
    UnsafeLink,
    ValidationFailed,
)
from publishing.store import (
    FirestorePublishStore,
    InMemoryPublishStore,
    PublishStore,
)
from shared.config import get_settings
from shared.constants import EVENT_PICTURES_FOLDER, NEWS_PICTURES_FOLDER
from shared.json_utils import convert_keys
from shared.types import (
    EventSubmission,
    NewsSubmission,
    UploadUrlRequest,
)

REGION = get_settings().function_region

ERROR_CODES = {
    ValidationFailed: https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
    UnsafeLink: https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
    InvalidRequest: https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
    Unauthenticated: https_fn.FunctionsErrorCode.UNAUTHENTICATED,
    PermissionDenied: https_fn.FunctionsErrorCode.PERMISSION_DENIED,
    AllocationConflict: https_fn.FunctionsErrorCode.ABORTED,
    PersistenceError: https_fn.FunctionsErrorCode.INTERNAL,
}

T = TypeVar("T")

initialize_app()

_store: PublishStore | None = None


def get_store() -> PublishStore:
    """Returns a singleton store so in-memory state persists across requests."""
    global _store
    if _store:
        return _store

    settings = get_settings()
    if settings.use_in_memory_store:
        _store = InMemoryPublishStore(max_attempts=settings.transaction_max_attempts)
    else:
        _store = FirestorePublishStore(max_attempts=settings.transaction_max_attempts)
    return _store


def _parse_request(data_class: Type[T], data) -> T:
    if not isinstance(data, dict):
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            "Request data must be an object.",
        )
    return from_dict(
        data_class=data_class,
        data=convert_keys(data, "camel_to_snake"),
        config=Config(check_types=False),
    )


def to_https_error(error: PublishError) -> https_fn.HttpsError:
    """Maps a publishing error onto the callable error code for its kind."""
    code = ERROR_CODES.get(type(error), https_fn.FunctionsErrorCode.INTERNAL)
    return https_fn.HttpsError(code, error.message, error.details or None)


def start_news_publish(uid: str, data) -> dict:
    submission = _parse_request(NewsSubmission, data)
    try:
        result = publisher.publish_news(get_store(), uid, submission)
    except PublishError as e:
        logger.error(f"[News Publish] Error: {e.message}", details=e.details)
        raise to_https_error(e)
    except Exception as e:
        logger.error(f"[News Publish] Error: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to publish news",
            {"message": str(e)},
        )
    return convert_keys(asdict(result), "snake_to_camel")


def start_event_publish(uid: str, data) -> dict:
    submission = _parse_request(EventSubmission, data)
    try:
        result = publisher.publish_event(get_store(), uid, submission)
    except PublishError as e:
        logger.error(f"[Event Publish] Error: {e.message}", details=e.details)
        raise to_https_error(e)
    except Exception as e:
        logger.error(f"[Event Publish] Error: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to publish event",
            {"message": str(e)},
        )
    return convert_keys(asdict(result), "snake_to_camel")


def start_upload_url(folder: str, item_id, content_type) -> dict:
    try:
        result = uploads.create_upload_url(
            storage.bucket(),
            folder,
            item_id,
            content_type,
            expires_in=get_settings().upload_url_expiry_seconds,
        )
    except PublishError as e:
        raise to_https_error(e)
    except Exception as e:
        logger.error(f"[Upload] Error generating signed URL for {folder}: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL, "Failed to generate upload URL"
        )
    return convert_keys(asdict(result), "snake_to_camel")


def _require_staff(req: https_fn.CallableRequest, action: str) -> str:
    try:
        return require_staff(req.auth, action)
    except PublishError as e:
        raise to_https_error(e)


@https_fn.on_call(region=REGION, memory=options.MemoryOption.MB_256)
def publish_news(req: https_fn.CallableRequest) -> dict:
    """
    Publishes a news article under the next sequential id.

    Args:
        req (https_fn.CallableRequest): The request, containing title, author
            and optionally desc, link, imageUrl and customDate.

    Returns:
        A dictionary with success, newsId and message.
    """
    uid = _require_staff(req, "publish news")
    return start_news_publish(uid, req.data)


@https_fn.on_call(region=REGION, memory=options.MemoryOption.MB_256)
def get_news_upload_url(req: https_fn.CallableRequest) -> dict:
    """
    Returns a 5 minute signed URL for uploading the picture of a news article.

    Args:
        req (https_fn.CallableRequest): The request, containing contentType
            and newsId.
    """
    _require_staff(req, "upload news images")
    request = _parse_request(UploadUrlRequest, req.data)
    return start_upload_url(
        NEWS_PICTURES_FOLDER, request.news_id, request.content_type
    )


@https_fn.on_call(region=REGION, memory=options.MemoryOption.MB_256)
def publish_event(req: https_fn.CallableRequest) -> dict:
    """
    Publishes an event under the next sequential event id.

    Args:
        req (https_fn.CallableRequest): The request, containing title, place,
            dateFrom, dateTo and optionally description, link and imageUrl.

    Returns:
        A dictionary with success, eventId and message.
    """
    uid = _require_staff(req, "publish events")
    return start_event_publish(uid, req.data)


@https_fn.on_call(region=REGION, memory=options.MemoryOption.MB_256)
def get_event_upload_url(req: https_fn.CallableRequest) -> dict:
    """
    Returns a 5 minute signed URL for uploading the picture of an event.

    Args:
        req (https_fn.CallableRequest): The request, containing contentType
            and eventId.
    """
    _require_staff(req, "upload event images")
    request = _parse_request(UploadUrlRequest, req.data)
    return start_upload_url(
        EVENT_PICTURES_FOLDER, request.event_id, request.content_type
    )
