from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

# Importing the guard registers the storage-layer listeners on the mapped
# classes before any session is handed out.
import app.employees.guard  # noqa: F401
from app.settings import app_settings

engine = create_async_engine(
    app_settings.database_url,
    pool_pre_ping=True,
    future=True,
)

AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the integrity error comes from a unique index.

    PostgreSQL drivers expose the SQLSTATE; SQLite only reports it in the
    message. Check-constraint and trigger failures (23514) must not match.
    """
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in str(orig)


CHECK_VIOLATION = "23514"


def is_check_violation(exc: IntegrityError) -> bool:
    """True for check-constraint and guard-trigger failures."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == CHECK_VIOLATION
    return "CHECK constraint failed" in str(orig)
