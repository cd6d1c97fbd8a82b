"""
auth/store.py -- SQLAlchemy Core persistence layer for auth entities.

Pattern: Repository + Data Mapper.
UserStore and OtpStore are the repositories; _row_to_user / _row_to_otp are
the mappers. Service and route code never touches SQL directly.

Errors:
  Every SQLAlchemyError is re-raised as auth.errors.StoreError carrying the
  driver message, so the API can answer 500 {"error": <message>} without
  knowing about SQLAlchemy.

OTP expiry:
  OTP rows live for a fixed TTL from created_at. Reads filter on the TTL so
  an expired code is unreadable the moment it expires; purge_expired() is
  the physical delete, called periodically by the API lifespan task.

DB path: takeoverlab.db at the project root unless DATABASE_URL is set.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import Column, Float, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import Pool

from auth.errors import StoreError
from auth.models import OtpRecord, User
from core.config import get_settings

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    # Not unique: duplicate registrations are accepted as separate rows.
    Column("email", String(255), nullable=False, index=True),
    Column("password", Text, nullable=False),
    Column("first_name", String(255)),
    Column("last_name", String(255)),
    Column("phone", String(50)),
    Column("address", Text),
    Column("city", String(255)),
    Column("zip_code", String(20)),
    Column("is_admin", Integer, nullable=False, server_default="0"),
    Column("created_at", String(32), nullable=False),
)

_otps = Table(
    "otps",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, index=True),
    Column("otp", String(6), nullable=False),
    Column("created_at", Float, nullable=False),  # epoch seconds
)


# ---------------------------------------------------------------------------
# Engine helpers
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers never block behind a writer."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _make_engine(db_url: str, poolclass: type[Pool] | None = None) -> Engine:
    """Build an engine; poolclass pins the connection pool instead of the dialect default."""
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    kwargs: dict = {"connect_args": connect_args}
    if poolclass is not None:
        kwargs["poolclass"] = poolclass
    engine = create_engine(db_url, **kwargs)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class _Repository:
    """Shared engine lifecycle and error translation for both stores."""

    def __init__(self, db_url: str | None = None, poolclass: type[Pool] | None = None) -> None:
        self.engine: Engine = _make_engine(db_url or get_settings().database_url, poolclass)
        try:
            _metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    @contextmanager
    def _connect(self) -> Iterator[Connection]:
        """Yield a connection; surface any driver failure as StoreError."""
        try:
            with self.engine.connect() as conn:
                yield conn
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Credential store
# ---------------------------------------------------------------------------


class UserStore(_Repository):
    """Repository for User records.

    Usage:
        store = UserStore()
        uid = store.create_user(User(email="a@x.com", password=hash_password("pw")))
        user = store.get_by_email("a@x.com")
        store.close()
    """

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned ID. No uniqueness check on email."""
        with self._connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    email=user.email,
                    password=user.password,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    phone=user.phone,
                    address=user.address,
                    city=user.city,
                    zip_code=user.zip_code,
                    is_admin=1 if user.is_admin else 0,
                    created_at=user.created_at or _now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_by_email(self, email: str) -> User | None:
        """Return the oldest user with this exact (case-sensitive) email, or None."""
        with self._connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email).order_by(_users.c.id)).first()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: int) -> User | None:
        with self._connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).first()
        return _row_to_user(row) if row is not None else None

    def list_users(self) -> list[User]:
        """Return all users in insertion order. Admin-only operation."""
        with self._connect() as conn:
            rows = conn.execute(_users.select().order_by(_users.c.id)).fetchall()
        return [_row_to_user(r) for r in rows]


# ---------------------------------------------------------------------------
# OTP store
# ---------------------------------------------------------------------------


class OtpStore(_Repository):
    """Repository for OtpRecord rows with a fixed time-to-live.

    clock is injectable so tests can move time forward without sleeping.

    Usage:
        store = OtpStore(ttl=30)
        store.delete_all("a@x.com")
        store.create(OtpRecord(email="a@x.com", otp="123456"))
        store.find_one("a@x.com", "123456")
        store.purge_expired()
    """

    def __init__(
        self,
        db_url: str | None = None,
        ttl: int | None = None,
        clock: Callable[[], float] = time.time,
        poolclass: type[Pool] | None = None,
    ) -> None:
        super().__init__(db_url, poolclass)
        self.ttl = ttl if ttl is not None else get_settings().otp_ttl_seconds
        self._clock = clock

    def _cutoff(self) -> float:
        return self._clock() - self.ttl

    def delete_all(self, email: str) -> int:
        """Delete every OTP row for email, expired or not. Returns rows removed."""
        with self._connect() as conn:
            result = conn.execute(_otps.delete().where(_otps.c.email == email))
            conn.commit()
        return result.rowcount

    def create(self, record: OtpRecord) -> int:
        """Insert a record stamped with the current clock and return its ID."""
        created_at = record.created_at if record.created_at is not None else self._clock()
        with self._connect() as conn:
            result = conn.execute(_otps.insert().values(email=record.email, otp=record.otp, created_at=created_at))
            conn.commit()
            return result.inserted_primary_key[0]

    def find_one(self, email: str, otp: str) -> OtpRecord | None:
        """Return an unexpired record matching both email and code exactly."""
        with self._connect() as conn:
            row = conn.execute(
                _otps.select().where(
                    (_otps.c.email == email) & (_otps.c.otp == otp) & (_otps.c.created_at > self._cutoff())
                )
            ).first()
        return _row_to_otp(row) if row is not None else None

    def find_by_email(self, email: str) -> OtpRecord | None:
        """Return the newest unexpired record for email."""
        with self._connect() as conn:
            row = conn.execute(
                _otps.select()
                .where((_otps.c.email == email) & (_otps.c.created_at > self._cutoff()))
                .order_by(_otps.c.created_at.desc(), _otps.c.id.desc())
            ).first()
        return _row_to_otp(row) if row is not None else None

    def list_all(self) -> list[OtpRecord]:
        """Return every unexpired record, newest first."""
        with self._connect() as conn:
            rows = conn.execute(
                _otps.select()
                .where(_otps.c.created_at > self._cutoff())
                .order_by(_otps.c.created_at.desc(), _otps.c.id.desc())
            ).fetchall()
        return [_row_to_otp(r) for r in rows]

    def purge_expired(self) -> int:
        """Physically delete expired rows. Returns number of rows removed."""
        with self._connect() as conn:
            result = conn.execute(_otps.delete().where(_otps.c.created_at <= self._cutoff()))
            conn.commit()
        return result.rowcount


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        password=row.password,
        first_name=row.first_name,
        last_name=row.last_name,
        phone=row.phone,
        address=row.address,
        city=row.city,
        zip_code=row.zip_code,
        is_admin=bool(row.is_admin),
        created_at=row.created_at,
    )


def _row_to_otp(row) -> OtpRecord:
    return OtpRecord(id=row.id, email=row.email, otp=row.otp, created_at=row.created_at)
