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
"""Errors raised by the publishing pipeline.

Each error carries a stable message and optional structured details that are
returned to the client unchanged.
"""

from typing import Any, Optional


class PublishError(Exception):
    """Base class for failures surfaced to the caller."""

    retryable = False

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationFailed(PublishError):
    """One or more fields of the submission are invalid."""

    def __init__(self, errors):
        super().__init__(
            "Validation failed",
            {"errors": [{"field": e.field, "message": e.message} for e in errors]},
        )
        self.errors = list(errors)


class UnsafeLink(PublishError):
    def __init__(self, reason: str):
        super().__init__("Link failed safety check", {"reason": reason})
        self.reason = reason


class InvalidRequest(PublishError):
    """The request is malformed outside of form field validation."""


class Unauthenticated(PublishError):
    pass


class PermissionDenied(PublishError):
    pass


class AllocationConflict(PublishError):
    """The id allocation transaction lost to a concurrent writer.

    Resubmitting the same request is safe.
    """

    retryable = True


class PersistenceError(PublishError):
    pass
