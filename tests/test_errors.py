import asyncio

from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError

from backlink_tracker.errors import StoreUnavailableError, is_unique_violation, store_failure
from backlink_tracker.routers import resources as resources_router


def _integrity(message):
    return IntegrityError("INSERT", {}, Exception(message))


def test_unique_violation_sqlite_message():
    exc = _integrity("UNIQUE constraint failed: websites.domain")
    assert is_unique_violation(exc, "websites", "domain")
    assert not is_unique_violation(exc, "resources", "domain")


def test_unique_violation_postgres_constraint_name():
    exc = _integrity('duplicate key value violates unique constraint "uq_resources_domain"')
    assert is_unique_violation(exc, "resources", "domain")


def test_unique_violation_composite_constraint():
    sqlite = _integrity("UNIQUE constraint failed: backlinks.website_id, backlinks.resource_id")
    postgres = _integrity(
        'duplicate key value violates unique constraint "uq_backlinks_website_resource"'
    )
    for exc in (sqlite, postgres):
        assert is_unique_violation(
            exc, "backlinks", "website_id", constraint="uq_backlinks_website_resource"
        )


def test_foreign_key_failure_is_not_unique_violation():
    exc = _integrity("FOREIGN KEY constraint failed")
    assert not is_unique_violation(exc, "backlinks", "website_id")


def test_store_failure_classification():
    transient = store_failure(OperationalError("SELECT", {}, Exception("database is locked")))
    assert isinstance(transient, StoreUnavailableError)
    assert transient.retryable is True
    assert store_failure(asyncio.TimeoutError()) is not None
    assert store_failure(ProgrammingError("SELECT", {}, Exception("syntax error"))) is None


async def test_transient_store_failure_is_retryable(client, monkeypatch):
    async def locked(session, resource_id):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(resources_router.resource_service, "get", locked)

    response = await client.get("/api/resources/1")
    assert response.status_code == 500
    assert response.headers["Retry-After"] == "1"
    assert response.json() == {
        "success": False,
        "message": "The database is temporarily unavailable, please retry",
        "retryable": True,
    }


async def test_other_store_failure_is_generic(client, monkeypatch):
    async def broken(session, resource_id):
        raise ProgrammingError("SELECT", {}, Exception("no such column: secret"))

    monkeypatch.setattr(resources_router.resource_service, "get", broken)

    response = await client.get("/api/resources/1")
    assert response.status_code == 500
    body = response.json()
    assert body == {"success": False, "message": "An unexpected error occurred"}
    assert "Retry-After" not in response.headers
