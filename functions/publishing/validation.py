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
"""Server-side validation of publish submissions."""

import re
from datetime import date, datetime
from typing import Any, List, Optional

from shared.constants import TITLE_MAX_LENGTH, TITLE_MIN_LENGTH
from shared.types import EventSubmission, FieldError, NewsSubmission

HTML_TAG_PATTERN = re.compile(r"<[^>]*>")


def contains_markup(value: Any) -> bool:
    return isinstance(value, str) and HTML_TAG_PATTERN.search(value) is not None


def _validate_title(title: Any) -> Optional[FieldError]:
    if not title or not isinstance(title, str):
        return FieldError("title", "Title is required")
    length = len(title.strip())
    if length < TITLE_MIN_LENGTH:
        return FieldError("title", f"Title too short (min {TITLE_MIN_LENGTH} chars)")
    if length > TITLE_MAX_LENGTH:
        return FieldError("title", f"Title too long (max {TITLE_MAX_LENGTH} chars)")
    if contains_markup(title):
        return FieldError("title", "Title cannot contain HTML")
    return None


def _validate_required_text(value: Any, field: str, label: str) -> Optional[FieldError]:
    if not isinstance(value, str) or not value.strip():
        return FieldError(field, f"{label} is required")
    if contains_markup(value):
        return FieldError(field, f"{label} cannot contain HTML")
    return None


def _validate_optional_text(value: Any, field: str, label: str) -> Optional[FieldError]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        return FieldError(field, f"{label} must be text")
    if contains_markup(value):
        return FieldError(field, f"{label} cannot contain HTML")
    return None


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parses an ISO 8601 date or datetime string.

    Returns None for anything that is not a parseable string.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    try:
        parsed = date.fromisoformat(text)
    except ValueError:
        return None
    return datetime(parsed.year, parsed.month, parsed.day)


def validate_news_inputs(submission: NewsSubmission) -> List[FieldError]:
    """
    Validates a news submission.

    All fields are checked and every violation is returned, at most one per
    field, so the client can fix the whole form in one round trip. The
    submission is not modified.

    Args:
        submission (NewsSubmission): The parsed client payload.

    Returns:
        List[FieldError]: Empty when the submission is valid.
    """
    checks = [
        _validate_title(submission.title),
        _validate_required_text(submission.author, "author", "Author"),
        _validate_optional_text(submission.body, "desc", "Description"),
        _validate_optional_text(submission.link, "link", "Link"),
    ]
    return [error for error in checks if error]


def validate_event_inputs(submission: EventSubmission) -> List[FieldError]:
    """Validates an event submission, collecting every field error."""
    errors = [
        _validate_title(submission.title),
        _validate_required_text(submission.place, "place", "Place"),
        _validate_optional_text(submission.description, "description", "Description"),
    ]

    date_from = parse_date(submission.date_from)
    date_to = parse_date(submission.date_to)
    if not submission.date_from:
        errors.append(FieldError("dateFrom", "Start date is required"))
    elif date_from is None:
        errors.append(FieldError("dateFrom", "Start date is not a valid date"))
    if not submission.date_to:
        errors.append(FieldError("dateTo", "End date is required"))
    elif date_to is None:
        errors.append(FieldError("dateTo", "End date is not a valid date"))
    if date_from and date_to and _naive(date_to) < _naive(date_from):
        errors.append(FieldError("dateTo", "End date cannot be before start date"))

    errors.append(_validate_optional_text(submission.link, "link", "Link"))
    return [error for error in errors if error]


def _naive(value: datetime) -> datetime:
    return value.replace(tzinfo=None) if value.tzinfo else value
