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

import re
from typing import Iterable, List

from shared import constants
from shared.errors import InvalidArgument

DATE_STAMP_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
BASE64_IMAGE_PATTERN = re.compile(
    r"^\s*data:([a-zA-Z]+/[a-zA-Z]+)?(;base64)?,[a-zA-Z0-9+/]+={0,2}\s*$"
)
DOCUMENT_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9]+(?: [a-zA-Z0-9]+)*$")
DOCUMENT_PATH_PATTERN = re.compile(
    r"^[a-z0-9]+(?:-[a-z0-9]+){1,%d}$" % (constants.DOCUMENT_PATH_MAX_SEGMENTS - 1)
)
TAG_PATTERN = re.compile(r"^[a-z0-9]+$")
URL_PATTERN = re.compile(r"^https?://\S+$")


def collapse_whitespace(value: str) -> str:
    return " ".join(value.split())


def is_date_stamp(value: object) -> bool:
    return isinstance(value, str) and DATE_STAMP_PATTERN.match(value) is not None


def is_username(value: object) -> bool:
    return isinstance(value, str) and USERNAME_PATTERN.match(value) is not None


def is_base64_image(value: object) -> bool:
    return isinstance(value, str) and BASE64_IMAGE_PATTERN.match(value) is not None


def normalize_document_name(name: str) -> str:
    """
    Trims and collapses whitespace, then checks the name is made of
    letters/digits separated by single spaces, 2-100 characters long.
    """
    name = collapse_whitespace(name)
    if not (
        constants.DOCUMENT_NAME_MIN_LENGTH
        <= len(name)
        <= constants.DOCUMENT_NAME_MAX_LENGTH
    ) or not DOCUMENT_NAME_PATTERN.match(name):
        raise InvalidArgument(
            "Document name must be 2-100 characters long and contain only "
            "letters or digits separated by single spaces"
        )
    return name


def create_document_path(name: str) -> str:
    """Derives the URL slug of a permanent document from its name."""
    path = collapse_whitespace(name).lower().replace(" ", "-")
    if not DOCUMENT_PATH_PATTERN.match(path):
        raise InvalidArgument(
            "Permanent document name must consist of 2-10 words made of "
            "letters or digits"
        )
    return path


def normalize_description(description: str) -> str:
    description = collapse_whitespace(description)
    if not (
        constants.DOCUMENT_DESCRIPTION_MIN_LENGTH
        <= len(description)
        <= constants.DOCUMENT_DESCRIPTION_MAX_LENGTH
    ):
        raise InvalidArgument(
            f"Description must be {constants.DOCUMENT_DESCRIPTION_MIN_LENGTH}-"
            f"{constants.DOCUMENT_DESCRIPTION_MAX_LENGTH} characters long"
        )
    return description


def normalize_tags(tags: Iterable[str]) -> List[str]:
    normalized = [tag.strip().lower() for tag in tags]
    if len(normalized) > constants.DOCUMENT_MAX_TAGS:
        raise InvalidArgument(f"Max {constants.DOCUMENT_MAX_TAGS} tags are allowed")
    if len(set(normalized)) != len(normalized):
        raise InvalidArgument("Tags must be unique")
    for tag in normalized:
        if not (
            constants.DOCUMENT_TAG_MIN_LENGTH
            <= len(tag)
            <= constants.DOCUMENT_TAG_MAX_LENGTH
        ) or not TAG_PATTERN.match(tag):
            raise InvalidArgument(f"Invalid tag: {tag}")
    return normalized


def check_date_stamp(value: str) -> str:
    if not is_date_stamp(value):
        raise InvalidArgument("Date must be an ISO-8601 UTC stamp")
    return value


def normalize_display_name(value: str) -> str:
    value = value.strip()
    if not (
        constants.DISPLAY_NAME_MIN_LENGTH
        <= len(value)
        <= constants.DISPLAY_NAME_MAX_LENGTH
    ) or not is_username(value):
        raise InvalidArgument(
            "Display name must be 2-25 characters long and contain only "
            "letters, digits, underscores or hyphens"
        )
    return value


def normalize_bio(value: str) -> str:
    value = value.strip()
    if not constants.BIO_MIN_LENGTH <= len(value) <= constants.BIO_MAX_LENGTH:
        raise InvalidArgument(
            f"Bio must be {constants.BIO_MIN_LENGTH}-{constants.BIO_MAX_LENGTH} "
            "characters long"
        )
    return value


def check_url(value: str) -> str:
    value = value.strip()
    if len(value) > constants.PROFILE_URL_MAX_LENGTH or not URL_PATTERN.match(value):
        raise InvalidArgument("Invalid URL")
    return value
