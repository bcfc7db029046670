"""Tests for the SQLite job repository."""

import asyncio
import re

import pytest
import pytest_asyncio

from jobboard.db.repository import (
    InvalidJobIdError,
    JobRepository,
    StorageError,
    new_job_id,
    parse_job_id,
)
from jobboard.models import parse_job_fields


@pytest_asyncio.fixture
async def repository(tmp_path):
    """Create a connected repository backed by a temp database file."""
    repo = JobRepository(str(tmp_path / "db" / "jobs.db"))
    await repo.connect()
    yield repo
    await repo.close()


def make_fields(job_payload, **overrides):
    return parse_job_fields({**job_payload, **overrides})


def test_new_job_ids_are_unique_and_parseable():
    ids = {new_job_id() for _ in range(100)}

    assert len(ids) == 100
    for job_id in ids:
        assert parse_job_id(job_id) == job_id


@pytest.mark.parametrize("job_id", ["", "123", "not-an-id", "0123456789ABCDEF01234567", "g" * 24])
def test_malformed_ids_are_rejected(job_id):
    with pytest.raises(InvalidJobIdError):
        parse_job_id(job_id)


@pytest.mark.asyncio
async def test_save_assigns_id_and_posted_at(repository, job_payload):
    job = await repository.save(make_fields(job_payload))

    assert re.fullmatch(r"[0-9a-f]{24}", job.id)
    assert job.posted_at is not None
    assert job.job_title == "Engineer"
    assert job.remote is True
    assert job.salary == "Not specified"


@pytest.mark.asyncio
async def test_find_returns_insertion_order(repository, job_payload):
    first = await repository.save(make_fields(job_payload, jobTitle="First"))
    second = await repository.save(make_fields(job_payload, jobTitle="Second"))
    third = await repository.save(make_fields(job_payload, jobTitle="Third"))

    jobs = await repository.find()

    assert [job.id for job in jobs] == [first.id, second.id, third.id]


@pytest.mark.asyncio
async def test_find_filters_by_exact_category(repository, job_payload):
    await repository.save(make_fields(job_payload, jobCategory="Engineering"))
    await repository.save(make_fields(job_payload, jobCategory="engineering"))
    await repository.save(make_fields(job_payload, jobCategory="Design"))

    jobs = await repository.find({"jobCategory": "Engineering"})

    assert [job.job_category for job in jobs] == ["Engineering"]
    assert await repository.find({"jobCategory": "Sales"}) == []


@pytest.mark.asyncio
async def test_find_rejects_unknown_filter_field(repository):
    with pytest.raises(StorageError, match="Unknown filter field"):
        await repository.find({"owner": "me"})


@pytest.mark.asyncio
async def test_find_by_id(repository, job_payload):
    created = await repository.save(make_fields(job_payload))

    assert await repository.find_by_id(created.id) == created
    assert await repository.find_by_id(new_job_id()) is None
    with pytest.raises(InvalidJobIdError):
        await repository.find_by_id("nope")


@pytest.mark.asyncio
async def test_update_overwrites_fields_but_not_id_or_posted_at(repository, job_payload):
    created = await repository.save(make_fields(job_payload, salary="100k"))

    patch = parse_job_fields({**job_payload, "jobTitle": "Senior Engineer"}, for_update=True)
    updated = await repository.find_by_id_and_update(created.id, patch)

    assert updated.id == created.id
    assert updated.posted_at == created.posted_at
    assert updated.job_title == "Senior Engineer"
    assert updated.salary is None
    assert await repository.find_by_id(created.id) == updated


@pytest.mark.asyncio
async def test_update_missing_job_returns_none(repository, job_payload):
    patch = parse_job_fields(job_payload, for_update=True)

    assert await repository.find_by_id_and_update(new_job_id(), patch) is None


@pytest.mark.asyncio
async def test_delete_returns_last_state(repository, job_payload):
    created = await repository.save(make_fields(job_payload))

    deleted = await repository.find_by_id_and_delete(created.id)

    assert deleted == created
    assert await repository.find_by_id(created.id) is None
    assert await repository.find_by_id_and_delete(created.id) is None


@pytest.mark.asyncio
async def test_records_survive_reconnect(tmp_path, job_payload):
    db_path = str(tmp_path / "jobs.db")
    repo = await JobRepository(db_path).connect()
    created = await repo.save(make_fields(job_payload))
    await repo.close()

    repo = await JobRepository(db_path).connect()
    try:
        assert await repo.find_by_id(created.id) == created
    finally:
        await repo.close()


@pytest.mark.asyncio
async def test_operations_require_connection(tmp_path):
    repo = JobRepository(str(tmp_path / "jobs.db"))

    assert await repo.check_connection() is False
    with pytest.raises(StorageError, match="not connected"):
        await repo.find()

    await repo.connect()
    assert await repo.check_connection() is True
    await repo.close()
    assert repo.connected is False


@pytest.mark.asyncio
async def test_failed_write_does_not_undo_concurrent_save(repository, job_payload):
    existing = await repository.save(make_fields(job_payload))
    # bypasses validation so the NOT NULL constraint rejects the write
    broken = make_fields(job_payload).model_copy(update={"job_title": None})

    saved, failure = await asyncio.gather(
        repository.save(make_fields(job_payload, jobTitle="Concurrent")),
        repository.find_by_id_and_update(existing.id, broken),
        return_exceptions=True,
    )

    assert isinstance(failure, StorageError)
    assert await repository.find_by_id(saved.id) == saved
    assert await repository.find_by_id(existing.id) == existing


@pytest.mark.asyncio
async def test_failed_writes_interleaved_with_many_saves(repository, job_payload):
    existing = await repository.save(make_fields(job_payload))
    broken = make_fields(job_payload).model_copy(update={"company_name": None})

    operations = []
    for i in range(10):
        operations.append(repository.save(make_fields(job_payload, jobTitle=f"Job {i}")))
        operations.append(repository.find_by_id_and_update(existing.id, broken))
    results = await asyncio.gather(*operations, return_exceptions=True)

    saved = results[0::2]
    assert all(isinstance(error, StorageError) for error in results[1::2])
    stored = await repository.find()
    assert [job.id for job in stored] == [existing.id] + [job.id for job in saved]


@pytest.mark.asyncio
async def test_concurrent_updates_to_one_job_are_last_write_wins(repository, job_payload):
    created = await repository.save(make_fields(job_payload))
    first = parse_job_fields({**job_payload, "jobTitle": "First"}, for_update=True)
    second = parse_job_fields({**job_payload, "jobTitle": "Second"}, for_update=True)

    results = await asyncio.gather(
        repository.find_by_id_and_update(created.id, first),
        repository.find_by_id_and_update(created.id, second),
    )

    assert {job.job_title for job in results} == {"First", "Second"}
    stored = await repository.find_by_id(created.id)
    assert stored in results
    assert stored.id == created.id
    assert stored.posted_at == created.posted_at
