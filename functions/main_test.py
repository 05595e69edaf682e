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
# Standard library imports
import os
import unittest
from unittest.mock import patch, MagicMock

# Third-party library imports
from functions_framework import create_app

# Local application imports
# This patch must be applied before importing 'main'
with patch("firebase_admin.initialize_app"):
    import main
from publishing.errors import AllocationConflict, PermissionDenied
from publishing.store import InMemoryPublishStore
from shared.constants import NEWS_COUNTER_PATH, NEWS_ITEMS_PATH

MAIN_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "main.py")


class TestMainPublishNews(unittest.TestCase):

    @patch("firebase_admin.initialize_app")
    def setUp(self, initialize_app_mock):
        self.client = create_app("publish_news", MAIN_PATH).test_client()
        self.store = InMemoryPublishStore()

    def test_publish_news_requires_authentication(self):
        # Act: No Authorization header, so the request has no auth context.
        response = self.client.post(
            "/", json={"data": {"title": "Valid Title Here", "author": "Jane"}}
        )

        # Assert
        self.assertEqual(response.status_code, 401)
        response_data = response.get_json()
        self.assertEqual(response_data["error"]["status"], "UNAUTHENTICATED")

    @patch("main.get_store")
    @patch("main.require_staff")
    def test_publish_news_success(self, mock_require_staff, mock_get_store):
        # Arrange
        mock_require_staff.return_value = "staff-uid"
        mock_get_store.return_value = self.store
        payload = {
            "title": "  Spring concert  ",
            "author": "Jane",
            "desc": "Join us in the main hall.",
            "link": "https://school.example.org/concert",
            "imageUrl": "newsPictures/1",
        }

        # Act
        response = self.client.post("/", json={"data": payload})

        # Assert
        self.assertEqual(
            response.status_code,
            200,
            f"Request failed with status {response.status_code}. Body: {response.get_data(as_text=True)}",
        )
        self.assertEqual(
            response.get_json()["result"],
            {
                "success": True,
                "newsId": 1,
                "message": "News published successfully",
            },
        )
        stored = self.store.get_item(NEWS_ITEMS_PATH, 1)
        self.assertEqual(stored["title"], "Spring concert")
        self.assertEqual(stored["image"], "newsPictures/1")
        self.assertEqual(stored["createdBy"], "staff-uid")
        self.assertEqual(self.store.get_latest_id(NEWS_COUNTER_PATH), 1)

    @patch("main.get_store")
    @patch("main.require_staff")
    def test_publish_news_validation_errors(self, mock_require_staff, mock_get_store):
        mock_require_staff.return_value = "staff-uid"
        mock_get_store.return_value = self.store

        response = self.client.post(
            "/", json={"data": {"title": "Hi", "author": "<b>A</b>"}}
        )

        self.assertEqual(response.status_code, 400)
        error = response.get_json()["error"]
        self.assertEqual(error["status"], "INVALID_ARGUMENT")
        self.assertEqual(error["message"], "Validation failed")
        self.assertEqual(
            error["details"]["errors"],
            [
                {"field": "title", "message": "Title too short (min 3 chars)"},
                {"field": "author", "message": "Author cannot contain HTML"},
            ],
        )
        self.assertEqual(self.store.get_latest_id(NEWS_COUNTER_PATH), 0)

    @patch("main.get_store")
    @patch("main.require_staff")
    def test_publish_news_blacklisted_link(self, mock_require_staff, mock_get_store):
        mock_require_staff.return_value = "staff-uid"
        mock_get_store.return_value = self.store
        payload = {
            "title": "Valid Title Here",
            "author": "Jane",
            "link": "https://malware.com/x",
        }

        response = self.client.post("/", json={"data": payload})

        self.assertEqual(response.status_code, 400)
        error = response.get_json()["error"]
        self.assertEqual(error["message"], "Link failed safety check")
        self.assertEqual(error["details"], {"reason": "Domain blacklisted"})

    @patch("main.get_store")
    @patch("main.require_staff")
    def test_publish_news_conflict_is_aborted(self, mock_require_staff, mock_get_store):
        mock_require_staff.return_value = "staff-uid"
        mock_store = MagicMock()
        mock_store.allocate_and_write.side_effect = AllocationConflict(
            "Id allocation conflicted"
        )
        mock_get_store.return_value = mock_store

        response = self.client.post(
            "/", json={"data": {"title": "Valid Title Here", "author": "Jane"}}
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.get_json()["error"]["status"], "ABORTED")

    @patch("main.get_store")
    @patch("main.require_staff")
    def test_publish_news_unexpected_error_is_internal(
        self, mock_require_staff, mock_get_store
    ):
        mock_require_staff.return_value = "staff-uid"
        mock_store = MagicMock()
        mock_store.allocate_and_write.side_effect = RuntimeError("disk on fire")
        mock_get_store.return_value = mock_store

        response = self.client.post(
            "/", json={"data": {"title": "Valid Title Here", "author": "Jane"}}
        )

        self.assertEqual(response.status_code, 500)
        error = response.get_json()["error"]
        self.assertEqual(error["status"], "INTERNAL")
        self.assertEqual(error["message"], "Failed to publish news")

    @patch("main.require_staff")
    def test_publish_news_permission_denied(self, mock_require_staff):
        mock_require_staff.side_effect = PermissionDenied(
            "Only staff can publish news"
        )

        response = self.client.post(
            "/", json={"data": {"title": "Valid Title Here", "author": "Jane"}}
        )

        self.assertEqual(response.status_code, 403)
        error = response.get_json()["error"]
        self.assertEqual(error["status"], "PERMISSION_DENIED")
        self.assertEqual(error["message"], "Only staff can publish news")


class TestMainPublishEvent(unittest.TestCase):

    @patch("firebase_admin.initialize_app")
    def setUp(self, initialize_app_mock):
        self.client = create_app("publish_event", MAIN_PATH).test_client()

    @patch("main.get_store")
    @patch("main.require_staff")
    def test_publish_event_success(self, mock_require_staff, mock_get_store):
        mock_require_staff.return_value = "staff-uid"
        mock_get_store.return_value = InMemoryPublishStore()
        payload = {
            "title": "Open day",
            "place": "Gym",
            "dateFrom": "2026-05-01",
            "dateTo": "2026-05-02",
        }

        response = self.client.post("/", json={"data": payload})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.get_json()["result"],
            {
                "success": True,
                "eventId": 1,
                "message": "Event published successfully",
            },
        )

    @patch("main.get_store")
    @patch("main.require_staff")
    def test_publish_event_missing_dates(self, mock_require_staff, mock_get_store):
        mock_require_staff.return_value = "staff-uid"
        mock_get_store.return_value = InMemoryPublishStore()

        response = self.client.post(
            "/", json={"data": {"title": "Open day", "place": "Gym"}}
        )

        self.assertEqual(response.status_code, 400)
        fields = [e["field"] for e in response.get_json()["error"]["details"]["errors"]]
        self.assertEqual(fields, ["dateFrom", "dateTo"])


class TestMainGetNewsUploadUrl(unittest.TestCase):

    @patch("firebase_admin.initialize_app")
    def setUp(self, initialize_app_mock):
        self.client = create_app("get_news_upload_url", MAIN_PATH).test_client()

    @patch("main.storage")
    @patch("main.require_staff")
    def test_get_news_upload_url(self, mock_require_staff, mock_storage):
        mock_require_staff.return_value = "staff-uid"
        mock_bucket = MagicMock()
        mock_storage.bucket.return_value = mock_bucket
        mock_bucket.blob.return_value.generate_signed_url.return_value = (
            "https://storage.example/signed"
        )

        response = self.client.post(
            "/", json={"data": {"contentType": "image/png", "newsId": 7}}
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.get_json()["result"],
            {
                "uploadUrl": "https://storage.example/signed",
                "fileName": "newsPictures/7",
                "expiresIn": 300,
            },
        )
        mock_bucket.blob.assert_called_once_with("newsPictures/7")

    @patch("main.storage")
    @patch("main.require_staff")
    def test_get_news_upload_url_rejects_non_image(
        self, mock_require_staff, mock_storage
    ):
        mock_require_staff.return_value = "staff-uid"

        response = self.client.post(
            "/", json={"data": {"contentType": "text/html", "newsId": 7}}
        )

        self.assertEqual(response.status_code, 400)
        error = response.get_json()["error"]
        self.assertEqual(error["status"], "INVALID_ARGUMENT")
        self.assertIn("must be image", error["message"])
        mock_storage.bucket.return_value.blob.assert_not_called()

    @patch("main.storage")
    @patch("main.require_staff")
    def test_get_news_upload_url_signing_failure(self, mock_require_staff, mock_storage):
        mock_require_staff.return_value = "staff-uid"
        mock_storage.bucket.return_value.blob.return_value.generate_signed_url.side_effect = AttributeError(
            "you need a private key to sign credentials"
        )

        response = self.client.post(
            "/", json={"data": {"contentType": "image/jpeg", "newsId": "3"}}
        )

        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.get_json()["error"]["message"], "Failed to generate upload URL"
        )


class TestMainGetStore(unittest.TestCase):

    def setUp(self):
        main._store = None

    def tearDown(self):
        main._store = None

    @patch.object(main, "get_settings")
    def test_in_memory_store_is_singleton(self, mock_settings):
        mock_settings.return_value = type(
            "Settings",
            (),
            {"use_in_memory_store": True, "transaction_max_attempts": 3},
        )()

        store = main.get_store()

        self.assertIsInstance(store, InMemoryPublishStore)
        self.assertEqual(store.max_attempts, 3)
        self.assertIs(main.get_store(), store)


if __name__ == "__main__":
    unittest.main()
