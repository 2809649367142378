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
from unittest.mock import MagicMock

import requests

from backend.config import Settings
from backups import service
from backups.client import FirestoreBackupClient
from shared.errors import Internal, Unauthenticated
from validation.payloads import CreateBackupPayload, UseBackupPayload


def _settings(**overrides):
    values = {"project_id": "docs-app", "backup_token": "s3cret"}
    values.update(overrides)
    return Settings.model_construct(**values)


class CheckTokenTest(unittest.TestCase):

    def test_accepts_matching_token(self):
        service.check_token(_settings(), "s3cret")

    def test_rejects_wrong_or_unset_token(self):
        with self.assertRaisesRegex(Unauthenticated, "Invalid backup token"):
            service.check_token(_settings(), "guess")
        with self.assertRaises(Unauthenticated):
            service.check_token(_settings(backup_token=None), "")


class CreateBackupTest(unittest.TestCase):

    def test_starts_export(self):
        client = MagicMock()
        client.export_documents.return_value = {"name": "operations/abc"}

        result = service.create_backup(
            client, _settings(), CreateBackupPayload(token="s3cret")
        )

        self.assertEqual(result["operation"], "operations/abc")
        client.export_documents.assert_called_once_with(
            f"gs://docs-app-backups/backups/{result['backup_id']}"
        )

    def test_uses_configured_bucket(self):
        client = MagicMock()
        client.export_documents.return_value = {}

        service.create_backup(
            client,
            _settings(backups_bucket="my-backups"),
            CreateBackupPayload(token="s3cret"),
        )

        uri = client.export_documents.call_args.args[0]
        self.assertTrue(uri.startswith("gs://my-backups/backups/"))

    def test_wrong_token_never_calls_the_api(self):
        client = MagicMock()

        with self.assertRaises(Unauthenticated):
            service.create_backup(client, _settings(), CreateBackupPayload(token="x"))
        client.export_documents.assert_not_called()

    def test_api_failure_is_internal(self):
        client = MagicMock()
        client.export_documents.side_effect = requests.HTTPError("403 Forbidden")

        with self.assertRaisesRegex(Internal, "Cannot create backup"):
            service.create_backup(
                client, _settings(), CreateBackupPayload(token="s3cret")
            )


class UseBackupTest(unittest.TestCase):

    def test_starts_import(self):
        client = MagicMock()
        client.import_documents.return_value = {"name": "operations/def"}
        payload = UseBackupPayload(token="s3cret", backup_id="2025-01-05T23-59-00Z")

        result = service.use_backup(client, _settings(), payload)

        self.assertEqual(
            result,
            {"backup_id": "2025-01-05T23-59-00Z", "operation": "operations/def"},
        )
        client.import_documents.assert_called_once_with(
            "gs://docs-app-backups/backups/2025-01-05T23-59-00Z"
        )

    def test_api_failure_is_internal(self):
        client = MagicMock()
        client.import_documents.side_effect = requests.ConnectionError()
        payload = UseBackupPayload(token="s3cret", backup_id="2025-01-05T23-59-00Z")

        with self.assertRaisesRegex(Internal, "Cannot use backup"):
            service.use_backup(client, _settings(), payload)


class FirestoreBackupClientTest(unittest.TestCase):

    def test_export_posts_to_admin_api(self):
        session = MagicMock()
        session.post.return_value.json.return_value = {"name": "operations/1"}
        client = FirestoreBackupClient("docs-app", session=session)

        operation = client.export_documents("gs://bucket/backups/1")

        self.assertEqual(operation, {"name": "operations/1"})
        session.post.assert_called_once_with(
            "https://firestore.googleapis.com/v1/projects/docs-app/databases/(default):exportDocuments",
            json={"outputUriPrefix": "gs://bucket/backups/1"},
            timeout=30,
        )
        session.post.return_value.raise_for_status.assert_called_once()

    def test_import_posts_to_admin_api(self):
        session = MagicMock()
        client = FirestoreBackupClient("docs-app", session=session)

        client.import_documents("gs://bucket/backups/1")

        url = session.post.call_args.args[0]
        self.assertTrue(url.endswith(":importDocuments"))
        self.assertEqual(
            session.post.call_args.kwargs["json"],
            {"inputUriPrefix": "gs://bucket/backups/1"},
        )


if __name__ == "__main__":
    unittest.main()
