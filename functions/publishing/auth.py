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
"""Staff authorization for publishing callables."""

from typing import Optional

from firebase_admin import auth

from publishing.errors import PermissionDenied, Unauthenticated
from shared.constants import STAFF_CLAIMS


def is_staff(custom_claims: Optional[dict]) -> bool:
    claims = custom_claims or {}
    return any(claims.get(claim) for claim in STAFF_CLAIMS)


def require_staff(auth_data, action: str) -> str:
    """
    Checks that the caller is signed in and holds a staff claim.

    Args:
        auth_data: The callable request's auth context, or None.
        action (str): Used in the error message, e.g. "publish news".

    Returns:
        str: The caller's uid.

    Raises:
        Unauthenticated: If there is no signed-in caller.
        PermissionDenied: If the caller is not admin, owner or teacher.
    """
    uid = getattr(auth_data, "uid", None) if auth_data is not None else None
    if not uid:
        raise Unauthenticated("User must be authenticated")

    try:
        user = auth.get_user(uid)
    except auth.UserNotFoundError as e:
        raise PermissionDenied(f"Only staff can {action}") from e

    if not is_staff(user.custom_claims):
        raise PermissionDenied(f"Only staff can {action}")
    return uid
