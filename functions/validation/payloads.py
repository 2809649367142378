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

"""Payload schemas of the callable functions.

Payloads arrive camelCase from the web client; `parse` converts the keys and
validates them once at the boundary so handlers only see typed values.
"""

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    ValidationError,
)

from shared.documents import RATING_CATEGORIES
from shared.errors import InvalidArgument
from shared.json_utils import convert_keys
from validation import validators

Id = Annotated[str, StringConstraints(min_length=1, max_length=128)]
DateStamp = Annotated[str, AfterValidator(validators.check_date_stamp)]
DocumentName = Annotated[str, AfterValidator(validators.normalize_document_name)]
Description = Annotated[str, AfterValidator(validators.normalize_description)]
Tags = Annotated[List[str], AfterValidator(validators.normalize_tags)]
DisplayName = Annotated[str, AfterValidator(validators.normalize_display_name)]
Bio = Annotated[str, AfterValidator(validators.normalize_bio)]
Url = Annotated[str, AfterValidator(validators.check_url)]
BackupId = Annotated[str, StringConstraints(pattern=r"^[0-9A-Za-z:._-]{1,128}$")]
RatingCategory = Literal[RATING_CATEGORIES]


class Payload(BaseModel):
    model_config = ConfigDict(extra="forbid")


class UpdateDocumentCodePayload(Payload):
    id: Id
    mdate: DateStamp
    code: str


class UpdateDocumentNamePayload(Payload):
    id: Id
    mdate: DateStamp
    name: DocumentName


class UpdatePrivateDocumentPayload(Payload):
    id: Id
    mdate: DateStamp
    name: DocumentName
    code: str
    visibility: Literal["private"]


class UpdatePublicDocumentPayload(Payload):
    id: Id
    mdate: DateStamp
    name: DocumentName
    code: str
    visibility: Literal["public"]


class UpdatePermanentDocumentPayload(Payload):
    id: Id
    mdate: DateStamp
    name: DocumentName
    code: str
    visibility: Literal["permanent"]
    description: Description
    tags: Tags = Field(default_factory=list)


UpdateDocumentPayload = TypeAdapter(
    Annotated[
        Union[
            UpdatePrivateDocumentPayload,
            UpdatePublicDocumentPayload,
            UpdatePermanentDocumentPayload,
        ],
        Field(discriminator="visibility"),
    ]
)


class CreateDocumentPayload(Payload):
    name: DocumentName
    code: str = ""


class DocumentIdPayload(Payload):
    id: Id


class RateDocumentPayload(Payload):
    document_id: Id
    category: RatingCategory


class UploadImagePayload(Payload):
    image: str


class NoopAvatarPayload(Payload):
    type: Literal["noop"]


class RemoveAvatarPayload(Payload):
    type: Literal["remove"]


class UpdateAvatarPayload(Payload):
    type: Literal["update"]
    data: str


AvatarPayload = Annotated[
    Union[NoopAvatarPayload, RemoveAvatarPayload, UpdateAvatarPayload],
    Field(discriminator="type"),
]


class UserProfilePayload(Payload):
    display_name: Optional[DisplayName] = None
    bio: Optional[Bio] = None
    avatar: AvatarPayload = Field(default_factory=lambda: NoopAvatarPayload(type="noop"))
    blog_url: Optional[Url] = None
    fb_url: Optional[Url] = None
    github_url: Optional[Url] = None
    twitter_url: Optional[Url] = None
    linked_in_url: Optional[Url] = None


class CreateBackupPayload(Payload):
    token: str


class UseBackupPayload(Payload):
    token: str
    backup_id: BackupId


def parse(schema: Any, raw_payload: Any, name: str | None = None):
    """
    Validates a raw callable payload against a pydantic model or TypeAdapter.

    Raises:
        InvalidArgument: If the payload does not match the schema.
    """
    name = name or getattr(schema, "__name__", "payload")
    data = convert_keys(raw_payload if raw_payload is not None else {}, "camel_to_snake")
    try:
        if isinstance(schema, TypeAdapter):
            return schema.validate_python(data)
        return schema.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        detail = f"{location}: {first['msg']}" if location else first["msg"]
        raise InvalidArgument(f"Invalid schema of {name}. {detail}") from e
