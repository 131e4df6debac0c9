import logging

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker

from catalog.core.config import settings

logger = logging.getLogger(__name__)

#################################################
## . Mysql
#################################################

# 쓰기 작업용 엔진 (Primary)
write_engine = create_async_engine(
    settings.write_database_url,
    pool_pre_ping=True,
    pool_recycle=3600,
    echo=settings.DB_ECHO
)

# 읽기 작업용 엔진 (Secondary). replica가 없으면 같은 URL을 사용
if settings.read_database_url == settings.write_database_url:
    read_engine = write_engine
else:
    read_engine = create_async_engine(
        settings.read_database_url,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=settings.DB_ECHO
    )

engine = write_engine

# 세션 팩토리 생성
WriteSessionLocal = sessionmaker(
    bind=write_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)

ReadSessionLocal = sessionmaker(
    bind=read_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)

Base = declarative_base()


# 쓰기 작업용 세션 (CUD 작업)
async def get_write_db():
    async with WriteSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error("Error in get_write_db session context.", extra={"error": str(e)}, exc_info=True)
            raise
        finally:
            await session.close()


# 읽기 작업용 세션 (R 작업)
async def get_read_db():
    async with ReadSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error("Error in get_read_db session context.", extra={"error": str(e)}, exc_info=True)
            raise
        finally:
            await session.close()


async def create_tables(db_engine=None):
    """테이블이 존재하지 않는 경우에만 생성"""
    # 모든 모델이 Base.metadata에 등록되도록 임포트
    import catalog.models  # noqa: F401

    db_engine = db_engine or write_engine
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    logger.info("Tables created or already exist.", extra={"tables": sorted(Base.metadata.tables)})


async def dispose_engines():
    await write_engine.dispose()
    if read_engine is not write_engine:
        await read_engine.dispose()
    logger.info("Database engines disposed.")
