from datetime import datetime, timezone
from uuid import uuid4

import pytest

from meeting_summarizer.repositories.document_repository import DocumentRepository


async def _create(repo: DocumentRepository, user_id: str = "user-1", filename: str = "notes_1.txt"):
    return await repo.create_document(
        filename=filename,
        original_name="notes.txt",
        mime_type="text/plain",
        size=42,
        content="Alice: we ship on Friday.",
        user_id=user_id,
    )


@pytest.mark.asyncio
async def test_create_assigns_id_without_summary(db_session):
    repo = DocumentRepository(db_session)

    document = await _create(repo)

    assert document.id is not None
    assert document.uploaded_at is not None
    assert document.summary is None
    assert document.summary_generated_at is None


@pytest.mark.asyncio
async def test_get_by_id_unknown_returns_none(db_session):
    assert await DocumentRepository(db_session).get_by_id(uuid4()) is None


@pytest.mark.asyncio
async def test_get_for_user_hides_other_users_documents(db_session):
    repo = DocumentRepository(db_session)
    document = await _create(repo, user_id="owner")

    assert (await repo.get_for_user(document.id, "owner")).id == document.id
    assert await repo.get_for_user(document.id, "someone-else") is None


@pytest.mark.asyncio
async def test_update_summary_writes_summary_and_timestamp(db_session):
    repo = DocumentRepository(db_session)
    document = await _create(repo)
    generated_at = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

    updated = await repo.update_summary(document.id, "<p>Ship Friday</p>", generated_at)

    assert updated.summary == "<p>Ship Friday</p>"
    assert updated.summary_generated_at.replace(tzinfo=timezone.utc) == generated_at

    reloaded = await repo.get_by_id(document.id)
    assert reloaded.summary == "<p>Ship Friday</p>"


@pytest.mark.asyncio
async def test_update_summary_unknown_document(db_session):
    assert await DocumentRepository(db_session).update_summary(uuid4(), "text") is None
