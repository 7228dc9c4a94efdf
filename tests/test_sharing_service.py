"""
Share-link lifecycle: issuance, resolution, expiry, revocation and notification.
"""

from __future__ import annotations

import logging
import uuid
from datetime import timedelta

import pytest

from doclocker.core.exceptions import (
    ExpiredError, ForbiddenError, InternalError, NotFoundError, ValidationError
)
from doclocker.db.repositories.document_repository import DocumentRepository
from doclocker.domains.sharing.services import ShareService, generate_share_token


@pytest.fixture
def share_service(session, settings, dispatcher, clock):
    return ShareService(session, settings, dispatcher, clock=clock)


def _tokens(*values):
    iterator = iter(values)
    return lambda: next(iterator)


def test_generated_tokens_are_256_bit_hex():
    token = generate_share_token()
    assert len(token) == 64
    int(token, 16)
    assert generate_share_token() != token


@pytest.mark.asyncio
async def test_issue_returns_link_and_expiry(share_service, document, owner, clock):
    grant = await share_service.issue_grant(document.uuid, owner, ttl_hours=2)

    assert grant.expires_at == clock.now + timedelta(hours=2)
    assert grant.share_link == f"http://frontend.test/shared/{grant.token}"

    stored = await DocumentRepository(share_service.session).get_by_uuid(document.uuid)
    assert stored.is_shared
    assert stored.share.token == grant.token
    assert stored.share.issued_at == clock.now


@pytest.mark.asyncio
async def test_default_ttl_is_24_hours(share_service, document, owner, clock):
    grant = await share_service.issue_grant(document.uuid, owner)
    assert grant.expires_at == clock.now + timedelta(hours=24)


@pytest.mark.asyncio
async def test_resolve_within_window_then_expired(share_service, document, owner, clock):
    grant = await share_service.issue_grant(document.uuid, owner, ttl_hours=1)

    clock.advance(minutes=30)
    shared = await share_service.resolve_grant(grant.token)
    assert shared.title == "Degree Certificate"
    assert shared.owner_name == "Owner Person"
    assert shared.file_name == "degree.pdf"
    assert shared.file_type == "application/pdf"
    assert "owner_id" not in shared.model_dump()

    clock.advance(minutes=31)
    with pytest.raises(ExpiredError):
        await share_service.resolve_grant(grant.token)


@pytest.mark.asyncio
async def test_expiry_boundary_is_inclusive(share_service, document, owner, clock):
    grant = await share_service.issue_grant(document.uuid, owner, ttl_hours=1)

    clock.advance(hours=1)
    await share_service.resolve_grant(grant.token)

    clock.advance(seconds=1)
    with pytest.raises(ExpiredError):
        await share_service.resolve_grant(grant.token)


@pytest.mark.asyncio
async def test_expired_resolution_does_not_clear_grant(share_service, document, owner, clock):
    grant = await share_service.issue_grant(document.uuid, owner, ttl_hours=1)
    clock.advance(hours=2)

    with pytest.raises(ExpiredError):
        await share_service.resolve_grant(grant.token)

    stored = await DocumentRepository(share_service.session).get_by_uuid(document.uuid)
    assert stored.share.token == grant.token


@pytest.mark.asyncio
async def test_reissue_invalidates_previous_token(share_service, document, owner):
    first = await share_service.issue_grant(document.uuid, owner)
    second = await share_service.issue_grant(document.uuid, owner)

    assert first.token != second.token
    with pytest.raises(NotFoundError):
        await share_service.resolve_grant(first.token)
    shared = await share_service.resolve_grant(second.token)
    assert shared.title == document.title


@pytest.mark.asyncio
async def test_reissue_revives_expired_document(share_service, document, owner, clock):
    await share_service.issue_grant(document.uuid, owner, ttl_hours=1)
    clock.advance(hours=5)

    fresh = await share_service.issue_grant(document.uuid, owner, ttl_hours=1)
    await share_service.resolve_grant(fresh.token)


@pytest.mark.asyncio
async def test_revoke_then_resolve_is_not_found(share_service, document, owner):
    grant = await share_service.issue_grant(document.uuid, owner)
    await share_service.revoke_grant(document.uuid, owner)

    with pytest.raises(NotFoundError) as exc_info:
        await share_service.resolve_grant(grant.token)
    assert exc_info.value.message == "Document not found or link expired"

    stored = await DocumentRepository(share_service.session).get_by_uuid(document.uuid)
    assert not stored.is_shared
    assert stored.share is None


@pytest.mark.asyncio
async def test_revoke_is_idempotent(share_service, document, owner):
    await share_service.revoke_grant(document.uuid, owner)
    await share_service.issue_grant(document.uuid, owner)
    await share_service.revoke_grant(document.uuid, owner)
    await share_service.revoke_grant(document.uuid, owner)

    status = await share_service.share_status(document.uuid, owner)
    assert status.is_shared is False


@pytest.mark.asyncio
async def test_unknown_token_is_not_found(share_service):
    with pytest.raises(NotFoundError):
        await share_service.resolve_grant("0" * 64)


@pytest.mark.asyncio
async def test_non_owner_cannot_issue_or_revoke(share_service, document, owner, stranger):
    with pytest.raises(ForbiddenError):
        await share_service.issue_grant(document.uuid, stranger)

    stored = await DocumentRepository(share_service.session).get_by_uuid(document.uuid)
    assert not stored.is_shared

    grant = await share_service.issue_grant(document.uuid, owner)
    with pytest.raises(ForbiddenError):
        await share_service.revoke_grant(document.uuid, stranger)
    await share_service.resolve_grant(grant.token)


@pytest.mark.asyncio
async def test_unknown_document_is_not_found(share_service, owner):
    with pytest.raises(NotFoundError):
        await share_service.issue_grant(uuid.uuid4(), owner)
    with pytest.raises(NotFoundError):
        await share_service.revoke_grant(uuid.uuid4(), owner)


@pytest.mark.asyncio
@pytest.mark.parametrize("ttl_hours", [0, -1, 721])
async def test_out_of_range_ttl_is_rejected(share_service, document, owner, ttl_hours):
    with pytest.raises(ValidationError):
        await share_service.issue_grant(document.uuid, owner, ttl_hours=ttl_hours)

    stored = await DocumentRepository(share_service.session).get_by_uuid(document.uuid)
    assert not stored.is_shared


@pytest.mark.asyncio
async def test_maximum_ttl_is_accepted(share_service, document, owner, clock):
    grant = await share_service.issue_grant(document.uuid, owner, ttl_hours=720)
    assert grant.expires_at == clock.now + timedelta(days=30)


@pytest.mark.asyncio
async def test_token_collision_is_retried(session, settings, clock, owner, document_factory):
    first_doc = await document_factory(owner, title="First")
    second_doc = await document_factory(owner, title="Second")
    taken, fresh = "a" * 64, "b" * 64

    await ShareService(session, settings, clock=clock, token_factory=_tokens(taken)).issue_grant(
        first_doc.uuid, owner
    )
    grant = await ShareService(session, settings, clock=clock, token_factory=_tokens(taken, fresh)).issue_grant(
        second_doc.uuid, owner
    )

    assert grant.token == fresh
    first = await ShareService(session, settings, clock=clock).resolve_grant(taken)
    assert first.title == "First"


@pytest.mark.asyncio
async def test_collision_retries_exhausted(session, settings, clock, owner, document_factory):
    first_doc = await document_factory(owner, title="First")
    second_doc = await document_factory(owner, title="Second")
    taken = "c" * 64

    await ShareService(session, settings, clock=clock, token_factory=lambda: taken).issue_grant(
        first_doc.uuid, owner
    )
    service = ShareService(session, settings, clock=clock, token_factory=lambda: taken)
    with pytest.raises(InternalError):
        await service.issue_grant(second_doc.uuid, owner)

    stored = await DocumentRepository(session).get_by_uuid(second_doc.uuid)
    assert not stored.is_shared


@pytest.mark.asyncio
async def test_conflict_on_save_is_retried(monkeypatch, session, settings, clock, owner, document_factory):
    first_doc = await document_factory(owner, title="First")
    second_doc = await document_factory(owner, title="Second")
    taken, fresh = "d" * 64, "e" * 64

    await ShareService(session, settings, clock=clock, token_factory=_tokens(taken)).issue_grant(
        first_doc.uuid, owner
    )

    async def token_is_free(self, token):
        return False

    # Занятый токен доходит до сохранения и упирается в уникальный индекс
    monkeypatch.setattr(DocumentRepository, "share_token_exists", token_is_free)
    grant = await ShareService(session, settings, clock=clock, token_factory=_tokens(taken, fresh)).issue_grant(
        second_doc.uuid, owner
    )

    assert grant.token == fresh
    first = await ShareService(session, settings, clock=clock).resolve_grant(taken)
    assert first.title == "First"
    second = await ShareService(session, settings, clock=clock).resolve_grant(fresh)
    assert second.title == "Second"


@pytest.mark.asyncio
async def test_document_deleted_during_issue_is_not_found(monkeypatch, share_service, session, document, owner):
    async def delete_then_report_free(self, token):
        await DocumentRepository(session).delete(document.uuid)
        return False

    monkeypatch.setattr(DocumentRepository, "share_token_exists", delete_then_report_free)

    with pytest.raises(NotFoundError):
        await share_service.issue_grant(document.uuid, owner)


@pytest.mark.asyncio
async def test_recipient_is_notified_after_issue(share_service, dispatcher, mailer, document, owner):
    grant = await share_service.issue_grant(document.uuid, owner, recipient_email="Friend@Example.com")
    await dispatcher.drain()

    assert len(mailer.sent) == 1
    message = mailer.sent[0]
    assert message["To"] == "Friend@Example.com"
    assert message["Subject"] == "Owner Person shared a document with you"
    assert grant.share_link in message.as_string()

    status = await share_service.share_status(document.uuid, owner)
    assert status.shared_with == ["friend@example.com"]


@pytest.mark.asyncio
async def test_reissue_resets_recipients(share_service, dispatcher, document, owner):
    await share_service.issue_grant(document.uuid, owner, recipient_email="friend@example.com")
    await share_service.issue_grant(document.uuid, owner)
    await dispatcher.drain()

    status = await share_service.share_status(document.uuid, owner)
    assert status.shared_with == []


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_issue(session, settings, clock, document, owner, failing_dispatcher):
    service = ShareService(session, settings, failing_dispatcher, clock=clock)

    grant = await service.issue_grant(document.uuid, owner, recipient_email="friend@example.com")
    await failing_dispatcher.drain()

    shared = await service.resolve_grant(grant.token)
    assert shared.title == document.title


@pytest.mark.asyncio
async def test_no_notification_without_recipient(share_service, dispatcher, mailer, document, owner):
    await share_service.issue_grant(document.uuid, owner)
    assert dispatcher.pending == 0
    assert mailer.sent == []


@pytest.mark.asyncio
async def test_share_status_reports_expiry(share_service, document, owner, clock):
    status = await share_service.share_status(document.uuid, owner)
    assert status.is_shared is False
    assert status.share_link is None

    grant = await share_service.issue_grant(document.uuid, owner, ttl_hours=1)
    status = await share_service.share_status(document.uuid, owner)
    assert status.is_shared and not status.is_expired
    assert status.share_link == grant.share_link

    clock.advance(hours=2)
    status = await share_service.share_status(document.uuid, owner)
    assert status.is_shared and status.is_expired


@pytest.mark.asyncio
async def test_full_token_never_logged(share_service, dispatcher, document, owner, caplog):
    caplog.set_level(logging.DEBUG, logger="doclocker")
    grant = await share_service.issue_grant(document.uuid, owner, recipient_email="friend@example.com")
    await share_service.resolve_grant(grant.token)
    await share_service.revoke_grant(document.uuid, owner)
    await dispatcher.drain()

    assert grant.token[:8] in caplog.text
    assert grant.token not in caplog.text
