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

import concurrent.futures
import io
import logging
import uuid
from dataclasses import dataclass

from PIL import Image as PIL_Image
from PIL import ImageOps

from backend.storage import StorageClient
from images import image as image_utils
from shared.constants import AVATAR_EXTENSION, AVATAR_MAX_SIZE_MB, AVATAR_QUALITY
from shared.errors import InvalidArgument
from shared.user_profile import Avatar, AvatarVariant

logger = logging.getLogger(__name__)

AVATAR_CONTENT_TYPE = f"image/{AVATAR_EXTENSION}"


@dataclass(frozen=True)
class AvatarSize:
    size: str
    w: int
    h: int


# `tn` is the thumbnail tier.
AVATAR_SIZES = (
    AvatarSize(size="lg", w=100, h=100),
    AvatarSize(size="md", w=64, h=64),
    AvatarSize(size="sm", w=32, h=32),
    AvatarSize(size="tn", w=24, h=24),
)


def avatar_path(uid: str, size: str) -> str:
    return f"{uid}/avatars/{size}"


def rescale(buffer: bytes, w: int, h: int) -> bytes:
    """Crops to cover w x h and re-encodes the image as WebP."""
    try:
        with PIL_Image.open(io.BytesIO(buffer)) as img:
            resized = ImageOps.fit(img.convert("RGBA"), (w, h))
    except (OSError, PIL_Image.DecompressionBombError) as e:
        raise InvalidArgument("Avatar is not a readable image") from e
    output = io.BytesIO()
    resized.save(output, format="WEBP", quality=AVATAR_QUALITY)
    return output.getvalue()


def check_avatar(image: image_utils.Image) -> None:
    if image.extension == "gif":
        raise InvalidArgument("Invalid extension of avatar")
    if image.size_mb > AVATAR_MAX_SIZE_MB:
        raise InvalidArgument("Invalid avatar size")


def rescale_and_upload_avatars(
    storage: StorageClient, uid: str, data: str, max_size_mb: float
) -> Avatar:
    """
    Renders every avatar size from a data URL image and uploads the
    renditions concurrently. Fails as a whole if any rescale or upload fails.
    """
    image = image_utils.create(data, max_size_mb=max_size_mb)
    check_avatar(image)

    with concurrent.futures.ThreadPoolExecutor(
        max_workers=len(AVATAR_SIZES)
    ) as executor:
        buffers = list(
            executor.map(lambda s: rescale(image.buffer, s.w, s.h), AVATAR_SIZES)
        )
        uploads = [
            executor.submit(
                storage.upload_bytes,
                avatar_path(uid, avatar_size.size),
                buffer,
                AVATAR_CONTENT_TYPE,
            )
            for avatar_size, buffer in zip(AVATAR_SIZES, buffers)
        ]
        for upload in uploads:
            upload.result()

    logger.info("Uploaded %d avatar renditions for user %s", len(uploads), uid)

    return Avatar(
        **{
            avatar_size.size: AvatarVariant(
                src=storage.public_url(avatar_path(uid, avatar_size.size)),
                id=str(uuid.uuid4()),
                w=avatar_size.w,
                h=avatar_size.h,
                ext=AVATAR_EXTENSION,
            )
            for avatar_size in AVATAR_SIZES
        }
    )


def remove_avatars(storage: StorageClient, uid: str) -> None:
    with concurrent.futures.ThreadPoolExecutor(
        max_workers=len(AVATAR_SIZES)
    ) as executor:
        deletions = [
            executor.submit(storage.delete, avatar_path(uid, avatar_size.size))
            for avatar_size in AVATAR_SIZES
        ]
        for deletion in deletions:
            deletion.result()
    logger.info("Removed avatar renditions of user %s", uid)
