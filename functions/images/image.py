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

import base64
import binascii
import re
from dataclasses import dataclass

from shared.constants import IMAGE_EXTENSIONS, IMAGE_MAX_SIZE_MB
from shared.errors import InvalidArgument
from validation import validators

_DATA_URL_PREFIX = re.compile(r"^data:image/\w+;base64,")

BYTES_IN_MEGABYTE = 1024 * 1024


@dataclass
class DecodedImage:
    blob: str
    content_type: str
    extension: str


@dataclass
class Image:
    extension: str
    content_type: str
    buffer: bytes

    @property
    def size_mb(self) -> float:
        return len(self.buffer) / BYTES_IN_MEGABYTE


def decode(image: str) -> DecodedImage:
    """
    Splits a data URL into its parts.

    Example: data:image/jpeg;base64,/9j/4AAQSkZJRgABAQE..
    """
    image = image.strip()
    meta = image.split(",", 1)[0]
    content_type = meta.split(":", 1)[1].split(";", 1)[0]
    extension = content_type.replace("image/", "")
    blob = _DATA_URL_PREFIX.sub("", image)
    return DecodedImage(blob=blob, content_type=content_type, extension=extension)


def create(image: object, max_size_mb: float = IMAGE_MAX_SIZE_MB) -> Image:
    """
    Validates a data URL image and decodes its payload.

    Args:
        image (object): The raw value sent by the client.
        max_size_mb (float): Ceiling for the decoded payload size.

    Raises:
        InvalidArgument: On a malformed data URL, an unsupported extension or
            a payload above the size ceiling.
    """
    if not validators.is_base64_image(image):
        raise InvalidArgument("Wrong image data type")

    decoded = decode(image)

    if decoded.extension not in IMAGE_EXTENSIONS:
        raise InvalidArgument(
            "Unsupported image format, use supported one: "
            + ", ".join(IMAGE_EXTENSIONS)
        )

    try:
        buffer = base64.b64decode(decoded.blob, validate=True)
    except binascii.Error as e:
        raise InvalidArgument("Wrong image data type") from e

    if len(buffer) > max_size_mb * BYTES_IN_MEGABYTE:
        raise InvalidArgument(f"Max image size is {max_size_mb:g} megabytes (MB)")

    return Image(
        extension=decoded.extension,
        content_type=decoded.content_type,
        buffer=buffer,
    )
