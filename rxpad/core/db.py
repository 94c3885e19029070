from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from rxpad.core.config import settings

# SQLite needs check_same_thread off for the threadpool FastAPI runs sync routes on
if "sqlite" in settings.database_url.lower():
    engine = create_engine(
        settings.database_url,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_engine(
        settings.database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
