"""
Object CRUD API endpoints.

Clients create objects (title, description, optional image), list them,
fetch one by id, and delete them. Create and delete are announced to
every connected push-channel client once they succeed.

Validation happens at the top of each handler, before any side effect:
a rejected request never reaches storage or the database.
"""

import logging
from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, File, Form, Request, Response, UploadFile, status
from pydantic import BaseModel, Field

from ...core.objects.errors import ValidationError
from ...core.objects.models import (
    CREATE_FIELDS,
    ObjectRecord,
    UploadedImage,
    validate_create_request,
    validate_image,
)
from ..dependencies import NotifierDep, ObjectServiceDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------

class ObjectResponse(BaseModel):
    """A stored object as returned to clients."""
    id: str = Field(description="Object identifier")
    title: str = Field(description="Object title")
    description: str = Field(description="Object description")
    image_url: Optional[str] = Field(
        None,
        serialization_alias="imageUrl",
        description="Public URL of the image, absent when none was uploaded",
    )
    created_at: datetime = Field(serialization_alias="createdAt", description="Creation time")
    updated_at: datetime = Field(serialization_alias="updatedAt", description="Last update time")

    @classmethod
    def from_record(cls, record: ObjectRecord) -> "ObjectResponse":
        return cls(
            id=record.id,
            title=record.title,
            description=record.description,
            image_url=record.image_url,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------

async def _read_image(file: Optional[UploadFile]) -> Optional[UploadedImage]:
    """
    Turn the multipart file part into an UploadedImage.

    Browsers send an empty, unnamed part when no file is picked; that
    counts as no file.
    """
    if file is None:
        return None

    data = await file.read()
    if not file.filename and not data:
        return None

    return UploadedImage(
        data=data,
        content_type=file.content_type or "application/octet-stream",
        filename=file.filename or "",
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=ObjectResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create object",
    description="Create an object from multipart form data with an optional image file",
)
async def create_object(
    request: Request,
    service: ObjectServiceDep,
    notifier: NotifierDep,
    title: Annotated[Optional[str], Form()] = None,
    description: Annotated[Optional[str], Form()] = None,
    file: Annotated[Optional[UploadFile], File(description="Image (JPEG, PNG, GIF, WebP), max 5MB")] = None,
) -> ObjectResponse:
    """
    Create a new object.

    The image, when present, is uploaded before the record is stored.
    If storing the record fails, the uploaded image is removed again.
    """
    form = await request.form()
    extra_fields = tuple(key for key in form.keys() if key not in CREATE_FIELDS)

    validated = validate_create_request(title, description, extra_fields)
    if isinstance(validated, list):
        logger.info("Rejected create request", extra={"errors": validated})
        raise ValidationError("Validation failed: " + "; ".join(validated), errors=validated)

    image = await _read_image(file)
    if image is not None:
        image_errors = validate_image(image)
        if image_errors:
            logger.info(
                "Rejected image upload",
                extra={
                    "content_type": image.content_type,
                    "size_bytes": image.size,
                    "errors": image_errors,
                }
            )
            raise ValidationError(image_errors[0], errors=image_errors)

    record = await service.create(validated, image)

    await notifier.object_created(record)

    return ObjectResponse.from_record(record)


@router.get(
    "",
    response_model=list[ObjectResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="List objects",
    description="All objects, most recently created first",
)
async def list_objects(service: ObjectServiceDep) -> list[ObjectResponse]:
    records = await service.list_all()
    return [ObjectResponse.from_record(record) for record in records]


@router.get(
    "/{object_id}",
    response_model=ObjectResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Get object",
    description="Retrieve a single object by id",
    responses={404: {"description": "Object not found"}},
)
async def get_object(object_id: str, service: ObjectServiceDep) -> ObjectResponse:
    record = await service.get(object_id)
    return ObjectResponse.from_record(record)


@router.delete(
    "/{object_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete object",
    description="Delete an object and, best effort, its image",
    responses={404: {"description": "Object not found"}},
)
async def delete_object(
    object_id: str,
    service: ObjectServiceDep,
    notifier: NotifierDep,
) -> Response:
    """
    Delete an object.

    The record is removed even if its image cannot be deleted from
    storage; that failure is only logged.
    """
    await service.delete(object_id)

    await notifier.object_deleted(object_id)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
