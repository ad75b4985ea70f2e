"""
PostgreSQL repository adapters - Implement the domain repository protocols.

This module provides the PostgreSQL implementations of the domain's
graduate, attendee and administrator ports using psycopg3 with raw SQL.

Every statement is parameterized. Each method runs its statements on one
pooled connection and commits before returning; no transaction spans two
repository calls, so multi-step flows (delete-then-insert of guests) are
best effort.

Stage token validity is checked with database time (``token_expiry > NOW()``)
so that application clock skew cannot extend a link's lifetime.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from psycopg import errors, sql
from psycopg_pool import ConnectionPool

from graduation.domain.exceptions import AdministratorExists
from graduation.domain.ports import Administrator, Attendee, Graduate, RegistrationSummary

logger = logging.getLogger(__name__)

_GRADUATE_COLUMNS = """
    id, email, first_name, last_name, promotion, is_attending,
    registration_stage, registration_complete, registration_token, token_expiry,
    registration_date, last_updated
"""

_ADMIN_COLUMNS = "id, username, email, password, role, last_login"

# Columns an administrator upsert may change
_ADMIN_UPDATABLE = frozenset({"email", "role", "password"})


def _to_graduate(row: tuple) -> Graduate:
    return Graduate(
        id=row[0],
        email=row[1],
        first_name=row[2],
        last_name=row[3],
        promotion=row[4],
        is_attending=row[5],
        registration_stage=row[6],
        registration_complete=row[7],
        registration_token=row[8],
        token_expiry=row[9],
        registration_date=row[10],
        last_updated=row[11],
    )


def _to_attendee(row: tuple) -> Attendee:
    return Attendee(
        id=row[0],
        graduate_id=row[1],
        first_name=row[2],
        last_name=row[3],
        date_of_birth=row[4],
    )


def _to_administrator(row: tuple) -> Administrator:
    return Administrator(
        id=row[0],
        username=row[1],
        email=row[2],
        password_hash=row[3],
        role=row[4],
        last_login=row[5],
    )


class PostgresGraduateRepository:
    """
    Implements GraduateRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Emails are matched case-insensitively; callers pass them lowercased.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def find_by_email(self, email: str) -> Graduate | None:
        sql_text = f"SELECT {_GRADUATE_COLUMNS} FROM graduates WHERE lower(email) = %s LIMIT 1"
        return self._fetch_one(sql_text, (email,))

    def find_by_id(self, graduate_id: int) -> Graduate | None:
        sql_text = f"SELECT {_GRADUATE_COLUMNS} FROM graduates WHERE id = %s"
        return self._fetch_one(sql_text, (graduate_id,))

    def find_by_live_token(self, token: str) -> Graduate | None:
        sql_text = f"""
            SELECT {_GRADUATE_COLUMNS}
            FROM graduates
            WHERE registration_token = %s
              AND token_expiry > NOW()
        """
        return self._fetch_one(sql_text, (token,))

    def record_level1(
        self,
        graduate_id: int,
        first_name: str,
        last_name: str,
        promotion: str,
        is_attending: bool,
        token: str,
        token_expiry: datetime,
    ) -> None:
        sql_text = """
            UPDATE graduates
            SET first_name = %s,
                last_name = %s,
                promotion = %s,
                is_attending = %s,
                registration_stage = 2,
                registration_complete = FALSE,
                registration_token = %s,
                token_expiry = %s,
                last_updated = NOW()
            WHERE id = %s
        """
        self._execute(
            sql_text,
            (first_name, last_name, promotion, is_attending, token, token_expiry, graduate_id),
        )

    def advance_to_stage3(self, graduate_id: int, token: str, token_expiry: datetime) -> None:
        sql_text = """
            UPDATE graduates
            SET registration_stage = 3,
                registration_token = %s,
                token_expiry = %s,
                last_updated = NOW()
            WHERE id = %s
        """
        self._execute(sql_text, (token, token_expiry, graduate_id))

    def mark_complete(self, graduate_id: int) -> None:
        sql_text = """
            UPDATE graduates
            SET registration_complete = TRUE, last_updated = NOW()
            WHERE id = %s
        """
        self._execute(sql_text, (graduate_id,))

    def create_invited(
        self,
        email: str,
        first_name: str,
        last_name: str,
        promotion: str,
        token: str,
        token_expiry: datetime,
    ) -> int:
        sql_text = """
            INSERT INTO graduates
                (email, first_name, last_name, promotion, registration_token, token_expiry)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql_text, (email, first_name, last_name, promotion, token, token_expiry))
            graduate_id = cursor.fetchone()[0]
            conn.commit()
        return graduate_id

    def reset_invitation(self, email: str, token: str, token_expiry: datetime) -> None:
        sql_text = """
            UPDATE graduates
            SET registration_token = %s,
                token_expiry = %s,
                registration_stage = 1,
                registration_complete = FALSE,
                last_updated = NOW()
            WHERE lower(email) = %s
        """
        self._execute(sql_text, (token, token_expiry, email))

    def list_summaries(self) -> list[RegistrationSummary]:
        sql_text = """
            SELECT g.id, g.first_name, g.last_name, g.email, g.promotion,
                   g.is_attending, g.registration_complete, COUNT(a.id) AS attendee_count
            FROM graduates g
            LEFT JOIN attendees a ON g.id = a.graduate_id
            GROUP BY g.id
            ORDER BY g.last_name, g.first_name
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql_text)
            rows = cursor.fetchall()
        return [
            RegistrationSummary(
                id=row[0],
                first_name=row[1],
                last_name=row[2],
                email=row[3],
                promotion=row[4],
                is_attending=row[5],
                registration_complete=bool(row[6]),
                attendee_count=row[7],
            )
            for row in rows
        ]

    def _fetch_one(self, sql_text: str, params: tuple) -> Graduate | None:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql_text, params)
            row = cursor.fetchone()
        return _to_graduate(row) if row is not None else None

    def _execute(self, sql_text: str, params: tuple) -> int:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql_text, params)
            conn.commit()
            return cursor.rowcount


class PostgresAttendeeRepository:
    """
    Implements AttendeeRepository protocol via psycopg3.

    Every statement filters on graduate_id so one graduate's link can never
    reach another graduate's guests.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def list_for_graduate(self, graduate_id: int) -> list[Attendee]:
        sql_text = """
            SELECT id, graduate_id, first_name, last_name, date_of_birth
            FROM attendees
            WHERE graduate_id = %s
            ORDER BY id
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql_text, (graduate_id,))
            return [_to_attendee(row) for row in cursor.fetchall()]

    def delete_for_graduate(self, graduate_id: int) -> None:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM attendees WHERE graduate_id = %s", (graduate_id,))
            conn.commit()

    def add(self, graduate_id: int, first_name: str, last_name: str, date_of_birth: str) -> int:
        sql_text = """
            INSERT INTO attendees (graduate_id, first_name, last_name, date_of_birth)
            VALUES (%s, %s, %s, %s)
            RETURNING id
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql_text, (graduate_id, first_name, last_name, date_of_birth))
            attendee_id = cursor.fetchone()[0]
            conn.commit()
        return attendee_id

    def update_scoped(
        self,
        graduate_id: int,
        attendee_id: int,
        first_name: str,
        last_name: str,
        date_of_birth: str,
    ) -> bool:
        sql_text = """
            UPDATE attendees
            SET first_name = %s, last_name = %s, date_of_birth = %s
            WHERE id = %s AND graduate_id = %s
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql_text, (first_name, last_name, date_of_birth, attendee_id, graduate_id))
            conn.commit()
            return cursor.rowcount == 1


class PostgresAdministratorRepository:
    """Implements AdministratorRepository protocol via psycopg3."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def find_by_username(self, username: str) -> Administrator | None:
        sql_text = f"SELECT {_ADMIN_COLUMNS} FROM administrators WHERE username = %s"
        return self._fetch_one(sql_text, (username,))

    def find_by_username_or_email(self, username: str, email: str) -> Administrator | None:
        sql_text = f"""
            SELECT {_ADMIN_COLUMNS}
            FROM administrators
            WHERE username = %s OR email = %s
            ORDER BY id
            LIMIT 1
        """
        return self._fetch_one(sql_text, (username, email))

    def create(self, username: str, email: str, password_hash: str, role: str) -> int:
        sql_text = """
            INSERT INTO administrators (username, email, password, role)
            VALUES (%s, %s, %s, %s)
            RETURNING id
        """
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql_text, (username, email, password_hash, role))
                admin_id = cursor.fetchone()[0]
                conn.commit()
        except errors.UniqueViolation:
            raise AdministratorExists(username) from None
        return admin_id

    def update_fields(self, admin_id: int, fields: dict[str, Any]) -> None:
        unknown = set(fields) - _ADMIN_UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update administrator columns: {sorted(unknown)}")
        if not fields:
            return

        columns = sorted(fields)
        query = sql.SQL("UPDATE administrators SET {assignments} WHERE id = %s").format(
            assignments=sql.SQL(", ").join(
                sql.SQL("{} = %s").format(sql.Identifier(column)) for column in columns
            )
        )
        params = [fields[column] for column in columns] + [admin_id]
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(query, params)
                conn.commit()
        except errors.UniqueViolation:
            raise AdministratorExists(fields.get("email", admin_id)) from None

    def touch_last_login(self, admin_id: int) -> None:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("UPDATE administrators SET last_login = NOW() WHERE id = %s", (admin_id,))
            conn.commit()

    def _fetch_one(self, sql_text: str, params: tuple) -> Administrator | None:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql_text, params)
            row = cursor.fetchone()
        return _to_administrator(row) if row is not None else None


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: graduation/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
