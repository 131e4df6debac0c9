import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from catalog.api.dependencies import get_media_manager
from catalog.core.exceptions import CatalogError
from catalog.schemas.media import MediaCreate, MediaResponse
from catalog.services.media_manager import MediaManager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[MediaResponse])
async def read_media(media_manager: MediaManager = Depends(get_media_manager)):
    try:
        return await media_manager.list_media()
    except Exception as e:
        logger.error("Error reading media library.", extra={"error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")


@router.post("", response_model=MediaResponse, status_code=status.HTTP_201_CREATED)
async def create_media(media: MediaCreate, media_manager: MediaManager = Depends(get_media_manager)):
    try:
        return await media_manager.create_media(name=media.name, url=media.url)
    except Exception as e:
        logger.error("Error creating media item.", extra={"media_name": media.name, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")


@router.delete("/{media_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_media(media_id: int, media_manager: MediaManager = Depends(get_media_manager)):
    try:
        await media_manager.delete_media(media_id)
    except CatalogError as e:
        logger.warning("Media deletion rejected.", extra={"media_id": media_id, "error": e.code})
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except Exception as e:
        logger.error("Error deleting media item.", extra={"media_id": media_id, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")
