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

import logging
import uuid
from dataclasses import asdict
from typing import List, Optional, Tuple

from backend.db import DbClient
from documents.update import ScopedNameExists
from shared.documents import (
    Document,
    PrivateDocument,
    Visibility,
    document_to_dict,
    document_to_dto,
    parse_document,
    parse_documents,
    parse_rating,
)
from shared.errors import NotFound
from shared.timestamps import now_stamp
from shared.user_profile import parse_user_profile, user_profile_to_dict
from validation.payloads import (
    CreateDocumentPayload,
    DocumentIdPayload,
    RateDocumentPayload,
)

logger = logging.getLogger(__name__)

ACCESSIBLE_VISIBILITIES = (Visibility.PUBLIC, Visibility.PERMANENT)


def _author(profile: Optional[dict]) -> Optional[dict]:
    if profile is None:
        return None
    return user_profile_to_dict(parse_user_profile(profile))


def _public_dto(
    document_id: str, document: Document, author: Optional[dict], rating: Optional[dict]
) -> dict:
    dto = document_to_dto(document_id, document)
    dto["author"] = author
    dto["rating"] = asdict(parse_rating(rating))
    return dto


def create_document(db: DbClient, uid: str, payload: CreateDocumentPayload) -> dict:
    """Creates a private document; its name must be unique among the caller's."""
    document_id = str(uuid.uuid4())

    def apply(documents):
        if any(
            isinstance(entry, dict) and entry.get("name") == payload.name
            for entry in (documents or {}).values()
        ):
            raise ScopedNameExists()
        stamp = now_stamp()
        document = PrivateDocument(
            name=payload.name, code=payload.code, cdate=stamp, mdate=stamp
        )
        return {document_id: document_to_dict(document)}, document

    document = db.modify_documents(uid, apply)
    logger.info("Created document %s for user %s", document_id, uid)
    return document_to_dto(document_id, document)


def delete_document(db: DbClient, uid: str, payload: DocumentIdPayload) -> dict:
    def apply(documents):
        if documents is None:
            raise NotFound("Documents collection not found")
        if payload.id not in documents:
            raise NotFound("Document not found")
        return {payload.id: None}, payload.id

    db.modify_documents(uid, apply)
    db.delete_rating(payload.id)
    logger.info("Deleted document %s for user %s", payload.id, uid)
    return {"id": payload.id}


def get_your_documents(db: DbClient, uid: str) -> List[dict]:
    """Returns the caller's documents, most recently modified first."""
    documents = parse_documents(db.get_documents(uid))
    dtos = [
        document_to_dto(document_id, document)
        for document_id, document in documents.items()
    ]
    return sorted(dtos, key=lambda dto: dto["mdate"], reverse=True)


def get_permanent_documents(db: DbClient) -> List[dict]:
    """Returns every user's permanent documents, newest first."""
    profiles = db.list_profiles()
    ratings = db.list_ratings()

    dtos = []
    for uid, entries in db.list_documents():
        for document_id, entry in entries.items():
            if (
                not isinstance(entry, dict)
                or entry.get("visibility") != Visibility.PERMANENT
            ):
                continue
            dtos.append(
                _public_dto(
                    document_id,
                    parse_document(entry),
                    _author(profiles.get(uid)),
                    ratings.get(document_id),
                )
            )
    return sorted(dtos, key=lambda dto: dto["cdate"], reverse=True)


def _find_accessible_document(
    db: DbClient, document_id: str
) -> Optional[Tuple[str, Document]]:
    for uid, entries in db.list_documents():
        entry = entries.get(document_id)
        if (
            isinstance(entry, dict)
            and entry.get("visibility") in ACCESSIBLE_VISIBILITIES
        ):
            return uid, parse_document(entry)
    return None


def get_accessible_document(db: DbClient, payload: DocumentIdPayload) -> dict:
    """Finds a public or permanent document of any user by its id."""
    found = _find_accessible_document(db, payload.id)
    if found is None:
        raise NotFound("Cannot find document")

    author_id, document = found
    return _public_dto(
        payload.id,
        document,
        _author(db.get_profile(author_id)),
        db.get_rating(payload.id),
    )


def rate_document(db: DbClient, uid: str, payload: RateDocumentPayload) -> dict:
    """Adds the caller's vote to a public or permanent document's rating."""
    if _find_accessible_document(db, payload.document_id) is None:
        raise NotFound("Cannot find document")

    rating = db.increment_rating(payload.document_id, payload.category)
    logger.info(
        "User %s rated document %s as %s", uid, payload.document_id, payload.category
    )
    return asdict(parse_rating(rating))
