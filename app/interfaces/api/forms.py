"""Helpers for multipart endpoints."""

from typing import Optional, Type, TypeVar

from fastapi import UploadFile
from pydantic import BaseModel, ValidationError

from app.core.exceptions import ValidationException
from app.infrastructure.image_host import ImageFile

M = TypeVar("M", bound=BaseModel)


def build_form_model(model: Type[M], **fields) -> M:
    """Validate form fields with a body schema, reporting errors like a JSON body would."""
    try:
        return model(**{k: v for k, v in fields.items() if v is not None})
    except ValidationError as e:
        raise ValidationException(
            "Request validation failed",
            details={"fields": [".".join(str(p) for p in err["loc"]) for err in e.errors()]},
        )


async def read_image_files(files: Optional[list[UploadFile]]) -> list[ImageFile]:
    images = []
    for upload in files or []:
        if not upload.filename:
            continue
        images.append(
            ImageFile(
                filename=upload.filename,
                content_type=upload.content_type or "",
                content=await upload.read(),
            )
        )
    return images
