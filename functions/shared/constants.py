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

# Firestore layout. Counters live on the parent document, items in the
# subcollection keyed by their sequential id.
NEWS_COUNTER_PATH = "homePageData/news"
NEWS_ITEMS_PATH = "homePageData/news/hirek"
EVENTS_COUNTER_PATH = "homePageData/events"
EVENTS_ITEMS_PATH = "homePageData/events/esemenyek"

# Cloud Storage folders for uploaded pictures.
NEWS_PICTURES_FOLDER = "newsPictures"
EVENT_PICTURES_FOLDER = "eventPictures"

LATEST_ID_FIELD = "latestId"

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 120

# Staff custom claims allowed to publish.
STAFF_CLAIMS = ("admin", "owner", "teacher")

DEFAULT_BLACKLISTED_DOMAINS = (
    "malware.com",
    "phishing.com",
    "evil.com",
)

DEFAULT_REGION = "europe-west3"
UPLOAD_URL_EXPIRY_SECONDS = 300
