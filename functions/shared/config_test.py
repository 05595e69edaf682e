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

import os
import unittest
from unittest.mock import patch

from shared.config import Settings
from shared.constants import DEFAULT_BLACKLISTED_DOMAINS


class SettingsTest(unittest.TestCase):

    @patch.dict(os.environ, {"HUB_BLACKLISTED_DOMAINS": "Spam.example, ads.test,"})
    def test_comma_separated_domains_from_environment(self):
        settings = Settings(_env_file=None)
        self.assertEqual(settings.blacklisted_domains, ["Spam.example", "ads.test"])
        self.assertEqual(
            settings.deny_list,
            DEFAULT_BLACKLISTED_DOMAINS + ("spam.example", "ads.test"),
        )

    @patch.dict(os.environ, {"HUB_BLACKLISTED_DOMAINS": '["a.test", "b.test"]'})
    def test_json_domains_from_environment(self):
        settings = Settings(_env_file=None)
        self.assertEqual(settings.blacklisted_domains, ["a.test", "b.test"])

    @patch.dict(
        os.environ,
        {"HUB_URL_CHECK_FAIL_OPEN": "false", "HUB_TRANSACTION_MAX_ATTEMPTS": "2"},
    )
    def test_scalar_settings_from_environment(self):
        settings = Settings(_env_file=None)
        self.assertFalse(settings.url_check_fail_open)
        self.assertEqual(settings.transaction_max_attempts, 2)
        self.assertEqual(settings.blacklisted_domains, [])


if __name__ == "__main__":
    unittest.main()
