from fastapi import APIRouter, Depends, UploadFile, File, Form, Response
from typing import List, Optional
import logging

from image_gallery.dependencies.dependencies import (
    get_listing_flow,
    get_settings,
    get_upload_flow,
    require_user,
)
from image_gallery.image_service.service import UploadFlow, ListingFlow
from image_gallery.image_service.models import ImageUpload, ImageListing
from image_gallery.exceptions import InvalidUploadException
from image_gallery.settings import Settings

log = logging.getLogger(__name__)

router = APIRouter(tags=["image-gallery"])

@router.post(
    "/upload/single",
    response_model=ImageUpload,
    dependencies=[Depends(require_user)],
)
async def upload_single(
    image: UploadFile = File(...),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),  # Comma Separated Values
    response: Response = None,
    flow: UploadFlow = Depends(get_upload_flow),
):
    """Uploads one image and stores its metadata."""
    if response:
        response.headers["X-Content-Type-Options"] = "nosniff"
    return await flow.upload_one(image, title=title, description=description, tags=tags)

@router.post(
    "/upload/multiple",
    response_model=List[ImageUpload],
    dependencies=[Depends(require_user)],
)
async def upload_multiple(
    images: List[UploadFile] = File(...),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),  # Comma Separated Values
    flow: UploadFlow = Depends(get_upload_flow),
    settings: Settings = Depends(get_settings),
):
    """Uploads several images sharing the same title, description and tags."""
    if len(images) > settings.max_upload_files:
        raise InvalidUploadException(
            f"Too many files: at most {settings.max_upload_files} images per request"
        )
    return await flow.upload_many(images, title=title, description=description, tags=tags)

@router.get("/images", response_model=List[ImageListing])
async def list_images(flow: ListingFlow = Depends(get_listing_flow)):
    """Lists every stored image with whatever metadata it has."""
    images = await flow.list_images()
    log.debug("Listed %d images", len(images))
    return images
