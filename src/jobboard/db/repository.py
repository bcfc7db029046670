"""Database operations for job postings."""

import asyncio
import logging
import os
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiosqlite

from ..models.job import JobFields, JobRecord

# Set up logging
logger = logging.getLogger(__name__)

JOB_ID_PATTERN = re.compile(r"^[0-9a-f]{24}$")

# Job field alias -> column
COLUMNS = {
    "jobTitle": "job_title",
    "location": "location",
    "remote": "remote",
    "employmentType": "employment_type",
    "description": "description",
    "applicationEmail": "application_email",
    "salary": "salary",
    "companyName": "company_name",
    "tagline": "tagline",
    "logo": "logo",
    "jobCategory": "job_category",
    "postedAt": "posted_at",
    "id": "id",
}
WRITABLE_COLUMNS = [column for column in COLUMNS.values() if column not in ("id", "posted_at")]


class StorageError(Exception):
    """Custom exception for storage operations."""

    pass


class InvalidJobIdError(StorageError):
    """Exception raised when a job id cannot be parsed."""

    pass


def new_job_id() -> str:
    """Generate a fresh 24-character hex job id."""
    return uuid.uuid4().hex[:24]


def parse_job_id(job_id: str) -> str:
    """Validate a job id.

    Raises:
        InvalidJobIdError: If the id is not 24 lowercase hex characters
    """
    if not isinstance(job_id, str) or not JOB_ID_PATTERN.match(job_id):
        raise InvalidJobIdError(f'Cast to ObjectId failed for value "{job_id}"')
    return job_id


class JobRepository:
    """Handles database operations for job postings.

    One aiosqlite connection is opened by ``connect()`` and shared by every
    request until ``close()``. Each write and its commit or rollback run
    under ``_lock``, and reads take the same lock, so one request never
    commits, rolls back or observes another request's pending statement.
    """

    def __init__(self, db_path: str):
        """Initialize the repository.

        Args:
            db_path: Path to the SQLite database file, or ``:memory:``
        """
        self.db_path = db_path
        self._conn: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._conn is not None

    async def connect(self) -> "JobRepository":
        """Open the connection and make sure the jobs table exists."""
        if self._conn is not None:
            return self

        db_dirname = os.path.dirname(self.db_path)
        if db_dirname and self.db_path != ":memory:":
            os.makedirs(db_dirname, exist_ok=True)

        try:
            self._conn = await aiosqlite.connect(self.db_path)
            self._conn.row_factory = aiosqlite.Row
            await self._conn.execute("PRAGMA busy_timeout = 5000")
            await self._create_tables()
        except aiosqlite.Error as e:
            logger.error(f"Failed to connect to database: {e}")
            await self.close()
            raise StorageError(str(e)) from e

        logger.info(f"Connected to database: {self.db_path}")
        return self

    async def _create_tables(self) -> None:
        await self._conn.execute("""
            CREATE TABLE IF NOT EXISTS jobs (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT UNIQUE NOT NULL,
                job_title TEXT NOT NULL,
                location TEXT NOT NULL,
                remote INTEGER NOT NULL DEFAULT 0,
                employment_type TEXT NOT NULL,
                description TEXT NOT NULL,
                application_email TEXT NOT NULL,
                salary TEXT,
                company_name TEXT NOT NULL,
                tagline TEXT,
                logo TEXT,
                job_category TEXT NOT NULL,
                posted_at TEXT NOT NULL
            )
        """)
        await self._conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_jobs_job_category ON jobs(job_category)"
        )
        await self._conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            conn, self._conn = self._conn, None
            await conn.close()
            logger.info("Database connection closed")

    async def check_connection(self) -> bool:
        """Check if the database connection is working."""
        if self._conn is None:
            return False
        try:
            async with self._conn.execute("SELECT 1") as cursor:
                await cursor.fetchone()
            return True
        except aiosqlite.Error:
            return False

    def _require_connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StorageError("Database is not connected")
        return self._conn

    @staticmethod
    def _to_record(row: aiosqlite.Row) -> JobRecord:
        data = {alias: row[column] for alias, column in COLUMNS.items()}
        data["remote"] = bool(data["remote"])
        return JobRecord.model_validate(data)

    @staticmethod
    def _to_params(fields: JobFields) -> Dict[str, Any]:
        values = fields.model_dump()
        values["remote"] = int(values["remote"])
        return {column: values[column] for column in WRITABLE_COLUMNS}

    async def find(self, filters: Optional[Dict[str, Any]] = None) -> List[JobRecord]:
        """Return every job matching ``filters`` in insertion order.

        Args:
            filters: Mapping of job field name to an exact value

        Returns:
            List[JobRecord]: Matching jobs

        Raises:
            StorageError: On an unknown filter field or a driver failure
        """
        conn = self._require_connection()
        clauses = []
        params: List[Any] = []
        for field, value in (filters or {}).items():
            column = COLUMNS.get(field)
            if column is None:
                raise StorageError(f"Unknown filter field: {field}")
            clauses.append(f"{column} = ?")
            params.append(value)

        sql = "SELECT * FROM jobs"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY seq ASC"

        try:
            async with self._lock:
                async with conn.execute(sql, params) as cursor:
                    rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            logger.error(f"Error in find: {e}")
            raise StorageError(str(e)) from e
        return [self._to_record(row) for row in rows]

    async def find_by_id(self, job_id: str) -> Optional[JobRecord]:
        """Look up a job by id; ``None`` when no such job exists."""
        conn = self._require_connection()
        job_id = parse_job_id(job_id)
        try:
            async with self._lock:
                async with conn.execute("SELECT * FROM jobs WHERE id = ?", (job_id,)) as cursor:
                    row = await cursor.fetchone()
        except aiosqlite.Error as e:
            logger.error(f"Error in find_by_id: {e}")
            raise StorageError(str(e)) from e
        return self._to_record(row) if row is not None else None

    async def _write(self, op: str, sql: str, params: Any) -> List[aiosqlite.Row]:
        """Run one write statement and commit it, or roll it back on failure.

        Raises:
            StorageError: If the driver rejects the statement
        """
        conn = self._require_connection()
        async with self._lock:
            try:
                async with conn.execute(sql, params) as cursor:
                    rows = await cursor.fetchall()
                await conn.commit()
            except aiosqlite.Error as e:
                logger.error(f"Error in {op}: {e}")
                await conn.rollback()
                raise StorageError(str(e)) from e
        return rows

    async def save(self, fields: JobFields) -> JobRecord:
        """Insert a new job, assigning its id and posting time.

        Args:
            fields: Validated job fields

        Returns:
            JobRecord: The stored job
        """
        params = self._to_params(fields)
        params["id"] = new_job_id()
        params["posted_at"] = datetime.now(timezone.utc).isoformat()

        columns = ", ".join(params)
        placeholders = ", ".join(f":{column}" for column in params)
        rows = await self._write(
            "save",
            f"INSERT INTO jobs ({columns}) VALUES ({placeholders}) RETURNING *",
            params,
        )
        return self._to_record(rows[0])

    async def find_by_id_and_update(
        self, job_id: str, fields: JobFields
    ) -> Optional[JobRecord]:
        """Overwrite every writable field of a job.

        ``id`` and ``posted_at`` are never touched.

        Returns:
            Optional[JobRecord]: The post-update job, or ``None`` if not found
        """
        job_id = parse_job_id(job_id)
        params = self._to_params(fields)
        assignments = ", ".join(f"{column} = :{column}" for column in params)
        params["id"] = job_id
        rows = await self._write(
            "find_by_id_and_update",
            f"UPDATE jobs SET {assignments} WHERE id = :id RETURNING *",
            params,
        )
        return self._to_record(rows[0]) if rows else None

    async def find_by_id_and_delete(self, job_id: str) -> Optional[JobRecord]:
        """Delete a job and return its last state, or ``None`` if not found."""
        job_id = parse_job_id(job_id)
        rows = await self._write(
            "find_by_id_and_delete", "DELETE FROM jobs WHERE id = ? RETURNING *", (job_id,)
        )
        return self._to_record(rows[0]) if rows else None
