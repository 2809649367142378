import os
import unittest
from unittest.mock import patch

from backend import dependencies
from backend.config import Settings
from backend.db import InMemoryDbClient
from backend.storage import CosStorageClient, InMemoryStorageClient


class SettingsTests(unittest.TestCase):
    @patch.dict(os.environ, {"GCLOUD_PROJECT": "docs-app-dev"}, clear=True)
    def test_dev_project(self):
        settings = Settings(_env_file=None)
        self.assertTrue(settings.is_dev_project)
        self.assertEqual(settings.resolved_backups_bucket(), "docs-app-dev-backups")

    @patch.dict(
        os.environ,
        {"GOOGLE_CLOUD_PROJECT": "docs-app", "BACKUPS_BUCKET": "custom"},
        clear=True,
    )
    def test_production_project(self):
        settings = Settings(_env_file=None)
        self.assertFalse(settings.is_dev_project)
        self.assertEqual(settings.resolved_backups_bucket(), "custom")

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_project(self):
        settings = Settings(_env_file=None)
        self.assertFalse(settings.is_dev_project)
        with self.assertRaises(RuntimeError):
            settings.resolved_backups_bucket()


class DependenciesTests(unittest.TestCase):
    def tearDown(self):
        dependencies.reset_clients()

    def test_in_memory_backends(self):
        settings = Settings.model_construct(use_in_memory_backends=True)

        self.assertIsInstance(dependencies.create_db_client(settings), InMemoryDbClient)
        self.assertIsInstance(
            dependencies.create_storage_client(settings), InMemoryStorageClient
        )

    @patch("backend.storage.boto3.client")
    def test_cos_storage_when_configured(self, mock_boto_client):
        settings = Settings.model_construct(
            cos_bucket="bucket",
            cos_region="ap-guangzhou",
            cos_endpoint="https://cos.ap-guangzhou.myqcloud.com",
            aws_access_key_id="key",
            aws_secret_access_key="secret",
        )

        self.assertIsInstance(
            dependencies.create_storage_client(settings), CosStorageClient
        )

    @patch("backend.dependencies.get_settings")
    def test_clients_are_cached(self, mock_settings):
        mock_settings.return_value = Settings.model_construct(use_in_memory_backends=True)

        self.assertIs(dependencies.get_db_client(), dependencies.get_db_client())
        self.assertIs(dependencies.get_storage_client(), dependencies.get_storage_client())
        mock_settings.assert_called()


if __name__ == "__main__":
    unittest.main()
