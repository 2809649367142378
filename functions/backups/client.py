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

from typing import Optional, Protocol

import google.auth
from google.auth.transport.requests import AuthorizedSession

FIRESTORE_API_URL = "https://firestore.googleapis.com/v1"
SCOPES = (
    "https://www.googleapis.com/auth/datastore",
    "https://www.googleapis.com/auth/cloud-platform",
)
REQUEST_TIMEOUT = 30  # seconds


class BackupClient(Protocol):
    """Starts managed export/import operations of the whole database."""

    def export_documents(self, output_uri: str) -> dict:
        ...

    def import_documents(self, input_uri: str) -> dict:
        ...


class FirestoreBackupClient:
    """Calls the Firestore Admin REST API with the runtime's credentials."""

    def __init__(self, project_id: str, session: Optional[AuthorizedSession] = None):
        self.project_id = project_id
        if session is None:
            credentials, _ = google.auth.default(scopes=list(SCOPES))
            session = AuthorizedSession(credentials)
        self._session = session

    @property
    def database_url(self) -> str:
        return f"{FIRESTORE_API_URL}/projects/{self.project_id}/databases/(default)"

    def export_documents(self, output_uri: str) -> dict:
        """
        Starts an export of every collection.

        Returns:
            dict: The long-running operation resource.
        """
        response = self._session.post(
            f"{self.database_url}:exportDocuments",
            json={"outputUriPrefix": output_uri},
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        return response.json()

    def import_documents(self, input_uri: str) -> dict:
        response = self._session.post(
            f"{self.database_url}:importDocuments",
            json={"inputUriPrefix": input_uri},
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        return response.json()
