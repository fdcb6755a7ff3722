from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from telemed.core.config import settings

# --- SQLAlchemy setup ---
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def enum_values(enum_cls):
    """Persist str enums by value ("pending"), not by member name."""
    return [member.value for member in enum_cls]


# --- DB Session Dependency ---
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
