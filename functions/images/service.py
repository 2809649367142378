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

from backend.storage import StorageClient
from images import image as image_utils
from shared.errors import Internal
from validation.payloads import UploadImagePayload

logger = logging.getLogger(__name__)


def upload_image(
    storage: StorageClient, payload: UploadImagePayload, max_size_mb: float
) -> dict:
    """
    Stores a validated image publicly under a random name.

    Returns:
        dict: extension, content_type, url and id (the object path) of the image.
    """
    image = image_utils.create(payload.image, max_size_mb=max_size_mb)

    if not storage.bucket_exists():
        raise Internal("Cannot find bucket for images")

    image_id = f"{uuid.uuid4()}.{image.extension}"
    storage.upload_bytes(image_id, image.buffer, image.content_type, public=True)
    logger.info("Uploaded image %s (%d bytes)", image_id, len(image.buffer))

    return {
        "extension": image.extension,
        "content_type": image.content_type,
        "url": storage.public_url(image_id),
        "id": image_id,
    }
