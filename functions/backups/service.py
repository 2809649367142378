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

import hmac
import logging
from datetime import datetime, timezone

import requests

from backend.config import Settings
from backups.client import BackupClient
from shared.errors import Internal, Unauthenticated
from validation.payloads import CreateBackupPayload, UseBackupPayload

logger = logging.getLogger(__name__)

BACKUP_ID_FORMAT = "%Y-%m-%dT%H-%M-%SZ"


def check_token(settings: Settings, token: str) -> None:
    """Compares the caller's token with BACKUP_TOKEN; an unset token rejects all."""
    if not settings.backup_token or not hmac.compare_digest(
        token.encode(), settings.backup_token.encode()
    ):
        raise Unauthenticated("Invalid backup token")


def backup_uri(settings: Settings, backup_id: str) -> str:
    return f"gs://{settings.resolved_backups_bucket()}/backups/{backup_id}"


def create_backup(
    client: BackupClient, settings: Settings, payload: CreateBackupPayload
) -> dict:
    check_token(settings, payload.token)

    backup_id = datetime.now(timezone.utc).strftime(BACKUP_ID_FORMAT)
    uri = backup_uri(settings, backup_id)
    try:
        operation = client.export_documents(uri)
    except requests.RequestException as e:
        logger.error("Failed to start backup %s: %s", backup_id, e)
        raise Internal("Cannot create backup") from e

    logger.info("Started backup %s to %s", backup_id, uri)
    return {"backup_id": backup_id, "operation": operation.get("name")}


def use_backup(
    client: BackupClient, settings: Settings, payload: UseBackupPayload
) -> dict:
    check_token(settings, payload.token)

    uri = backup_uri(settings, payload.backup_id)
    try:
        operation = client.import_documents(uri)
    except requests.RequestException as e:
        logger.error("Failed to restore backup %s: %s", payload.backup_id, e)
        raise Internal("Cannot use backup") from e

    logger.info("Started restoring backup %s from %s", payload.backup_id, uri)
    return {"backup_id": payload.backup_id, "operation": operation.get("name")}
