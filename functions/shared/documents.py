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

from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Dict, List, Literal, Optional, Union

from dacite import Config, DaciteError, from_dict

from shared.errors import corrupted_schema


class Visibility(StrEnum):
    PRIVATE = "private"
    PUBLIC = "public"
    PERMANENT = "permanent"


@dataclass
class PrivateDocument:
    name: str
    code: str
    cdate: str
    mdate: str
    visibility: Literal["private"] = "private"


@dataclass
class PublicDocument:
    name: str
    code: str
    cdate: str
    mdate: str
    visibility: Literal["public"] = "public"


@dataclass
class PermanentDocument:
    """A publicly listed document. Its name and path are unique across users."""

    name: str
    code: str
    cdate: str
    mdate: str
    description: str
    path: str
    tags: List[str] = field(default_factory=list)
    visibility: Literal["permanent"] = "permanent"


Document = Union[PrivateDocument, PublicDocument, PermanentDocument]

# A user's record in the documents collection: document id -> document.
Documents = Dict[str, Document]

_DOCUMENT_CLASSES = {
    Visibility.PRIVATE: PrivateDocument,
    Visibility.PUBLIC: PublicDocument,
    Visibility.PERMANENT: PermanentDocument,
}

RATING_CATEGORIES = ("ugly", "bad", "decent", "good", "perfect")


@dataclass
class Rating:
    ugly: int = 0
    bad: int = 0
    decent: int = 0
    good: int = 0
    perfect: int = 0


def parse_document(data: dict) -> Document:
    """
    Converts a stored document entry into its visibility variant.

    Raises:
        Internal: If the entry does not match any variant.
    """
    if not isinstance(data, dict):
        raise corrupted_schema("document")

    document_class = _DOCUMENT_CLASSES.get(data.get("visibility"))
    if document_class is None:
        raise corrupted_schema("document")

    data = dict(data)
    # Entries written by older clients may carry the id or a null tag list.
    data.pop("id", None)
    if data.get("tags", []) is None:
        data.pop("tags")

    try:
        return from_dict(data_class=document_class, data=data, config=Config())
    except DaciteError as e:
        raise corrupted_schema("document") from e


def parse_documents(data: Optional[dict]) -> Documents:
    return {
        document_id: parse_document(entry)
        for document_id, entry in (data or {}).items()
    }


def document_to_dict(document: Document) -> dict:
    return asdict(document)


def parse_rating(data: Optional[dict]) -> Rating:
    if not data:
        return Rating()
    try:
        return from_dict(
            data_class=Rating,
            data={k: v for k, v in data.items() if k in RATING_CATEGORIES},
            config=Config(),
        )
    except DaciteError as e:
        raise corrupted_schema("rating") from e


def document_to_dto(document_id: str, document: Document) -> dict:
    return {"id": document_id, **asdict(document)}
