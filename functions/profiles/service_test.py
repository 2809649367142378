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

import unittest
from unittest.mock import MagicMock, patch

from backend.db import InMemoryDbClient
from backend.storage import InMemoryStorageClient
from images.image_test import png_data_url
from profiles import service
from shared.errors import Exists, Internal
from validation import payloads


def _payload(**raw):
    return payloads.parse(payloads.UserProfilePayload, raw)


class UpdateYourUserProfileTest(unittest.TestCase):

    def setUp(self):
        self.db = InMemoryDbClient()
        self.storage = InMemoryStorageClient()

    def _update(self, uid, **raw):
        return service.update_your_user_profile(
            self.db, self.storage, uid, _payload(**raw), max_size_mb=4
        )

    def test_display_name_uniqueness_end_to_end(self):
        created = self._update("user-1", displayName="ada")

        with self.assertRaisesRegex(
            Exists, "This display name is already taken by other user"
        ):
            self._update("user-2", displayName="ada")
        self.assertIsNone(self.db.get_profile("user-2"))

        updated = self._update("user-1", displayName="ada_lovelace")

        self.assertEqual(updated["displayName"], "ada_lovelace")
        self.assertEqual(updated["id"], created["id"])
        self.assertEqual(updated["cdate"], created["cdate"])
        self.assertGreater(updated["mdate"], created["mdate"])

    def test_creates_profile_lazily(self):
        self.assertIsNone(service.get_your_user_profile(self.db, "user-1"))

        created = self._update(
            "user-1",
            bio="Writes about compilers and type systems.",
            githubUrl="https://github.com/example",
        )

        self.assertEqual(created["cdate"], created["mdate"])
        self.assertIsNone(created["displayName"])
        self.assertIsNone(created["avatar"])
        self.assertEqual(service.get_your_user_profile(self.db, "user-1"), created)

    def test_user_can_keep_own_display_name(self):
        self._update("user-1", displayName="ada")
        updated = self._update("user-1", displayName="ada", bio="Still the same person here.")
        self.assertEqual(updated["displayName"], "ada")

    def test_update_avatar_then_remove(self):
        with_avatar = self._update(
            "user-1", avatar={"type": "update", "data": png_data_url((120, 120))}
        )
        self.assertEqual(with_avatar["avatar"]["lg"]["w"], 100)
        self.assertEqual(len(self.storage.stored_objects), 4)

        kept = self._update("user-1", displayName="ada")
        self.assertEqual(kept["avatar"], with_avatar["avatar"])

        removed = self._update("user-1", avatar={"type": "remove"})
        self.assertIsNone(removed["avatar"])
        self.assertEqual(self.storage.stored_objects, {})

    def test_remove_without_avatar_skips_storage(self):
        storage = MagicMock()

        service.update_your_user_profile(
            self.db, storage, "user-1", _payload(avatar={"type": "remove"}), 4
        )

        storage.delete.assert_not_called()

    def test_stored_profile_with_invalid_schema(self):
        self.db.profiles["user-1"] = {"displayName": "broken"}

        with self.assertRaises(Internal):
            self._update("user-1", displayName="fixed")
        with self.assertRaises(Internal):
            service.get_your_user_profile(self.db, "user-1")

    @patch("profiles.service.avatars.rescale_and_upload_avatars")
    def test_name_clash_is_checked_before_avatar_upload(self, mock_upload):
        self._update("user-1", displayName="ada")

        with self.assertRaises(Exists):
            self._update(
                "user-2",
                displayName="ada",
                avatar={"type": "update", "data": png_data_url()},
            )
        mock_upload.assert_not_called()


if __name__ == "__main__":
    unittest.main()
