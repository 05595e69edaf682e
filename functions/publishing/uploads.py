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
"""Signed upload URLs for item pictures."""

import logging
from datetime import timedelta
from typing import Any

from publishing.errors import InvalidRequest
from shared.constants import UPLOAD_URL_EXPIRY_SECONDS
from shared.types import UploadUrlResult

logger = logging.getLogger(__name__)


def normalize_item_id(item_id: Any) -> int:
    """
    Returns `item_id` as a positive integer.

    Raises:
        InvalidRequest: If the id is missing or not a positive integer.
    """
    if isinstance(item_id, bool):
        raise InvalidRequest("Invalid item id")
    if isinstance(item_id, int):
        value = item_id
    elif isinstance(item_id, str) and item_id.strip().isdigit():
        value = int(item_id.strip())
    else:
        raise InvalidRequest("Invalid item id")
    if value < 1:
        raise InvalidRequest("Invalid item id")
    return value


def create_upload_url(
    bucket,
    folder: str,
    item_id: Any,
    content_type: Any,
    expires_in: int = UPLOAD_URL_EXPIRY_SECONDS,
) -> UploadUrlResult:
    """
    Creates a V4 signed URL that allows a single PUT of an image to
    `{folder}/{item_id}`.

    Args:
        bucket: A google.cloud.storage Bucket.
        folder (str): Storage folder, e.g. "newsPictures".
        item_id: The id the picture belongs to.
        content_type: MIME type the client will upload; must be an image.
        expires_in (int): Lifetime of the URL in seconds.

    Returns:
        UploadUrlResult: The signed URL and the object key it is scoped to.
    """
    if not isinstance(content_type, str) or not content_type.startswith("image/"):
        raise InvalidRequest("Invalid content type, must be image")

    file_name = f"{folder}/{normalize_item_id(item_id)}"
    blob = bucket.blob(file_name)
    signed_url = blob.generate_signed_url(
        version="v4",
        method="PUT",
        expiration=timedelta(seconds=expires_in),
        content_type=content_type,
    )
    logger.info(f"Generated signed upload URL for {file_name}")
    return UploadUrlResult(
        upload_url=signed_url, file_name=file_name, expires_in=expires_in
    )
