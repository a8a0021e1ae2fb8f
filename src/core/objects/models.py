"""
Domain models for the object gallery.

These models represent the core business concepts. They have no dependencies
on external frameworks, databases, or APIs. The record is a plain dataclass;
translation to MongoDB documents and HTTP payloads happens at the edges.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union
from uuid import uuid4


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ALLOWED_IMAGE_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
)

MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB

TITLE_MIN_LENGTH = 1
TITLE_MAX_LENGTH = 255

DESCRIPTION_MIN_LENGTH = 1
DESCRIPTION_MAX_LENGTH = 2000

# Fields accepted in a create request body
CREATE_FIELDS = ("title", "description", "file")


def new_object_id() -> str:
    return str(uuid4())


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------

@dataclass
class ObjectRecord:
    """
    A stored object: title, description, and an optional image.

    `id` is the external lookup key. It is generated once and never
    changes; the database's own primary key never leaves the repository.
    Timestamps are None until the repository persists the record.
    """
    title: str
    description: str
    image_url: Optional[str] = None
    id: str = field(default_factory=new_object_id)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_image(self) -> bool:
        return self.image_url is not None


@dataclass(frozen=True)
class UploadedImage:
    """An image file received with a create request."""
    data: bytes
    content_type: str
    filename: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class CreateObjectRequest:
    """A create request that passed validation."""
    title: str
    description: str


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _check_text(
    name: str,
    value: Optional[str],
    min_length: int,
    max_length: int,
) -> list[str]:
    if value is None or value == "":
        return [f"{name} should not be empty"]
    if not isinstance(value, str):
        return [f"{name} must be a string"]
    if len(value) < min_length:
        return [f"{name} must be longer than or equal to {min_length} characters"]
    if len(value) > max_length:
        return [f"{name} must be shorter than or equal to {max_length} characters"]
    return []


def validate_create_request(
    title: Optional[str],
    description: Optional[str],
    extra_fields: tuple[str, ...] = (),
) -> Union[CreateObjectRequest, list[str]]:
    """
    Validate the text part of a create request.

    Returns the validated request, or the list of field error messages.
    Unknown body fields are rejected rather than silently dropped.
    """
    errors = [f"property {name} should not exist" for name in extra_fields]
    errors += _check_text("title", title, TITLE_MIN_LENGTH, TITLE_MAX_LENGTH)
    errors += _check_text(
        "description", description, DESCRIPTION_MIN_LENGTH, DESCRIPTION_MAX_LENGTH
    )

    if errors:
        return errors

    return CreateObjectRequest(title=title, description=description)


def validate_image(image: UploadedImage) -> list[str]:
    """Check an image against the allowed types and the size limit."""
    if image.content_type not in ALLOWED_IMAGE_TYPES:
        return [
            f"Invalid file type. Allowed types: {', '.join(ALLOWED_IMAGE_TYPES)}"
        ]
    if image.size > MAX_FILE_SIZE:
        return [
            f"File size must not exceed {MAX_FILE_SIZE // (1024 * 1024)}MB"
        ]
    return []
