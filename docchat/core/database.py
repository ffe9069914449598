"""
Database configuration and session management
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from docchat.core.config import settings

engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,  # Verify connections before use
    # Connection timeout settings
    connect_args={
        "connect_timeout": 7,
        "application_name": "docchat-api",
        "options": "-c statement_timeout=10000"  # 10 second statement timeout
    } if "postgresql" in settings.database_url else (
        {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
    ),
    echo=False,
    future=True  # Use SQLAlchemy 2.0 style
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
