from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from classroom.core.config.settings import get_settings

DATABASE_URL = get_settings().DATABASE_URL

# SQLite connections are shared with the threadpool that runs sync routes
if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})
else:
    engine = create_engine(DATABASE_URL, pool_pre_ping=True)

# Create session
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
