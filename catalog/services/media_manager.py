import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.exceptions import NotFoundError
from catalog.models.media import MediaItem

logger = logging.getLogger(__name__)


class MediaManager:
    """미디어 라이브러리 (이미 업로드된 파일의 이름/URL만 관리)"""

    def __init__(self, db_session: AsyncSession):
        self.session = db_session

    async def list_media(self) -> List[MediaItem]:
        result = await self.session.execute(select(MediaItem).order_by(MediaItem.id.desc()))
        return list(result.scalars().all())

    async def create_media(self, name: str, url: Optional[str] = None) -> MediaItem:
        try:
            item = MediaItem(name=name, url=url)
            self.session.add(item)
            await self.session.commit()
            logger.info("Media item created.", extra={"media_id": item.id, "media_name": name})
            return item
        except Exception:
            await self.session.rollback()
            raise

    async def delete_media(self, media_id: int) -> None:
        try:
            item = await self.session.get(MediaItem, media_id)
            if not item:
                raise NotFoundError("NOT_FOUND", f"Media item {media_id} not found", media_id=media_id)
            await self.session.delete(item)
            await self.session.commit()
            logger.info("Media item deleted.", extra={"media_id": media_id})
        except Exception:
            await self.session.rollback()
            raise
