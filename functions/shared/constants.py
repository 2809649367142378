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

IMAGE_EXTENSIONS = ("png", "jpeg", "jpg", "gif", "webp")
IMAGE_MAX_SIZE_MB = 4

AVATAR_MAX_SIZE_MB = 4
AVATAR_EXTENSION = "webp"
AVATAR_QUALITY = 70

DOCUMENT_NAME_MIN_LENGTH = 2
DOCUMENT_NAME_MAX_LENGTH = 100
DOCUMENT_PATH_MAX_SEGMENTS = 10
DOCUMENT_DESCRIPTION_MIN_LENGTH = 50
DOCUMENT_DESCRIPTION_MAX_LENGTH = 250
DOCUMENT_TAG_MIN_LENGTH = 2
DOCUMENT_TAG_MAX_LENGTH = 50
DOCUMENT_MAX_TAGS = 10

DISPLAY_NAME_MIN_LENGTH = 2
DISPLAY_NAME_MAX_LENGTH = 25
BIO_MIN_LENGTH = 20
BIO_MAX_LENGTH = 500
PROFILE_URL_MAX_LENGTH = 500
