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
Persistence for published items: Firestore and an in-memory test implementation.

Both implementations allocate the next sequential id and write the item in a
single optimistic transaction, so either both the counter update and the item
write persist or neither does.
"""

from __future__ import annotations

import copy
import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Protocol

from firebase_admin import firestore
from google.api_core import exceptions
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from publishing.errors import AllocationConflict, PersistenceError
from publishing.id_allocator import counter_update, next_counter_value
from shared.constants import LATEST_ID_FIELD

logger = logging.getLogger(__name__)

DocumentBuilder = Callable[[int], dict]

class PublishStore(Protocol):
    """Operations the publishing pipeline needs from storage."""

    def allocate_and_write(
        self, counter_path: str, items_path: str, build_document: DocumentBuilder
    ) -> int:
        ...

    def write_item(self, items_path: str, item_id: int, document: dict) -> None:
        ...

    def get_item(self, items_path: str, item_id: int) -> Optional[dict]:
        ...

    def get_latest_id(self, counter_path: str) -> int:
        ...


def _is_exhausted_retries(error: ValueError) -> bool:
    """The transactional wrapper raises ValueError from the last Aborted commit."""
    return isinstance(error.__cause__, exceptions.Aborted)


class FirestorePublishStore:
    """Firestore-backed store using the client library's transaction retries."""

    def __init__(self, db=None, max_attempts: int = 5):
        self._db = db
        self.max_attempts = max_attempts

    @property
    def db(self):
        if self._db is None:
            self._db = firestore.client()
        return self._db

    def allocate_and_write(
        self, counter_path: str, items_path: str, build_document: DocumentBuilder
    ) -> int:
        """
        Allocates the next id from the counter at `counter_path` and writes
        the document built for it under `items_path`, in one transaction.

        Raises:
            AllocationConflict: If the transaction kept losing to concurrent
                writers until the retry budget ran out.
            PersistenceError: For any other storage failure.
        """
        db = self.db
        counter_ref = db.document(counter_path)
        items_ref = db.collection(items_path)

        @firestore.transactional
        def _allocate_transaction(transaction):
            snapshot = counter_ref.get(transaction=transaction)
            next_id, create = next_counter_value(
                snapshot.to_dict() if snapshot.exists else None
            )
            if create:
                transaction.set(counter_ref, counter_update(next_id))
            else:
                transaction.update(counter_ref, counter_update(next_id))
            transaction.set(items_ref.document(str(next_id)), build_document(next_id))
            return next_id

        try:
            return _allocate_transaction(
                db.transaction(max_attempts=self.max_attempts)
            )
        except (exceptions.Aborted, exceptions.Conflict) as e:
            raise AllocationConflict(f"Id allocation conflicted: {e}") from e
        except ValueError as e:
            if _is_exhausted_retries(e):
                raise AllocationConflict(f"Id allocation conflicted: {e}") from e
            raise PersistenceError(str(e)) from e
        except exceptions.GoogleAPICallError as e:
            raise PersistenceError(f"Firestore error: {e}") from e

    def write_item(self, items_path: str, item_id: int, document: dict) -> None:
        try:
            self.db.collection(items_path).document(str(item_id)).set(document)
        except exceptions.GoogleAPICallError as e:
            raise PersistenceError(f"Firestore error: {e}") from e

    def get_item(self, items_path: str, item_id: int) -> Optional[dict]:
        snapshot = self.db.collection(items_path).document(str(item_id)).get()
        return snapshot.to_dict() if snapshot.exists else None

    def get_latest_id(self, counter_path: str) -> int:
        snapshot = self.db.document(counter_path).get()
        if not snapshot.exists:
            return 0
        return (snapshot.to_dict() or {}).get(LATEST_ID_FIELD) or 0


class InMemoryPublishStore:
    """
    In-memory store for development and tests.

    Mirrors Firestore's optimistic transactions: the counter is read without
    holding the lock, and the commit only succeeds if nobody committed in
    between. A losing attempt is retried up to `max_attempts` times.
    """

    def __init__(self, max_attempts: int = 5):
        self.max_attempts = max_attempts
        self.documents: Dict[str, dict] = {}
        self._versions: Dict[str, int] = {}
        self._lock = threading.Lock()

    def reset(self) -> None:
        with self._lock:
            self.documents.clear()
            self._versions.clear()

    def allocate_and_write(
        self, counter_path: str, items_path: str, build_document: DocumentBuilder
    ) -> int:
        for attempt in range(1, self.max_attempts + 1):
            with self._lock:
                version = self._versions.get(counter_path, 0)
                counter = copy.deepcopy(self.documents.get(counter_path))

            next_id, _ = next_counter_value(counter)
            document = build_document(next_id)

            with self._lock:
                if self._versions.get(counter_path, 0) != version:
                    logger.debug(
                        f"Allocation on {counter_path} conflicted (attempt {attempt})"
                    )
                    continue
                self._put(counter_path, counter_update(next_id))
                self._put(_item_path(items_path, next_id), document)
                return next_id

        raise AllocationConflict(
            f"Id allocation conflicted: failed to commit transaction in "
            f"{self.max_attempts} attempts."
        )

    def write_item(self, items_path: str, item_id: int, document: dict) -> None:
        with self._lock:
            self._put(_item_path(items_path, item_id), document)

    def get_item(self, items_path: str, item_id: int) -> Optional[dict]:
        with self._lock:
            return copy.deepcopy(self.documents.get(_item_path(items_path, item_id)))

    def get_latest_id(self, counter_path: str) -> int:
        with self._lock:
            return (self.documents.get(counter_path) or {}).get(LATEST_ID_FIELD) or 0

    def _put(self, path: str, document: dict) -> None:
        self.documents[path] = _resolve_server_timestamps(document)
        self._versions[path] = self._versions.get(path, 0) + 1


def _item_path(items_path: str, item_id: int) -> str:
    return f"{items_path}/{item_id}"


def _resolve_server_timestamps(document: dict) -> dict:
    """Replaces SERVER_TIMESTAMP sentinels with the commit time, as Firestore does."""
    now = datetime.now(timezone.utc)
    return {
        key: now if value is SERVER_TIMESTAMP else copy.deepcopy(value)
        for key, value in document.items()
    }
