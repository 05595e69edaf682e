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
"""Sequential id allocation for published items."""

from typing import Optional, Tuple

from publishing.errors import PersistenceError
from shared.constants import LATEST_ID_FIELD


def next_counter_value(counter_data: Optional[dict]) -> Tuple[int, bool]:
    """
    Computes the next id from the current counter document.

    Args:
        counter_data (Optional[dict]): The counter document, or None when it
            does not exist yet.

    Returns:
        Tuple[int, bool]: The next id, and whether the counter document has
        to be created rather than updated.

    Raises:
        PersistenceError: If the stored counter is not a non-negative integer.
    """
    if counter_data is None:
        return 1, True
    current = counter_data.get(LATEST_ID_FIELD) or 0
    if not isinstance(current, int) or isinstance(current, bool) or current < 0:
        raise PersistenceError(f"Corrupt id counter value: {current!r}")
    return current + 1, False


def counter_update(next_id: int) -> dict:
    return {LATEST_ID_FIELD: next_id}
