"""
Tests for DocSignService: sending signature requests and the signing lifecycle.

Validates:
- send_request persists a frozen snapshot and returns its id
- Sequential mode: only the lowest-order pending recipient may sign
- Parallel mode: any pending recipient may sign
- Completed when everyone signed, Declined on the first decline; both terminal
"""

import pytest

from steps_kernel.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from steps_modules.docsign.composer import SignatureComposer
from steps_modules.docsign.models import (
    DocumentStatus,
    RecipientStatus,
    SigningMode,
)


@pytest.fixture
def composer(app_config) -> SignatureComposer:
    c = SignatureComposer(app_config.docsign)
    c.update_recipient(1, name="Ada Obi", email="ada@example.com")
    c.add_recipient("Bola Ade", "bola@example.com")
    c.upload_document("contract.pdf", 4096, "application/pdf")
    c.place_field("signature", page=1, position=(10, 80))
    c.place_field("signature", page=1, position=(60, 80), assigned_to=2)
    return c


@pytest.fixture
def sent_id(docsign_service, composer):
    return docsign_service.send_request(composer, uploaded_by="hr@example.com")


class TestSendRequest:
    def test_persisted_snapshot(self, docsign_service, sent_id):
        document = docsign_service.get(sent_id)
        assert document.status is DocumentStatus.PENDING
        assert document.uploaded_by == "hr@example.com"
        assert [r.name for r in document.recipients] == ["Ada Obi", "Bola Ade"]
        assert [f.assigned_to for f in document.fields] == [1, 2]
        assert document.fields[0].required is True

    def test_later_composer_edits_do_not_leak(self, docsign_service, composer, sent_id):
        composer.remove_recipient(2)
        assert len(docsign_service.get(sent_id).recipients) == 2

    def test_invalid_composer_not_persisted(self, docsign_service, app_config):
        with pytest.raises(ValidationError):
            docsign_service.send_request(SignatureComposer(app_config.docsign), "hr@example.com")
        assert docsign_service.list_documents() == []

    def test_list_by_uploader(self, docsign_service, sent_id):
        assert [d.id for d in docsign_service.list_documents(uploaded_by="hr@example.com")] == [sent_id]
        assert docsign_service.list_documents(uploaded_by="someone@example.com") == []


class TestSequentialSigning:
    def test_in_order(self, docsign_service, sent_id, deterministic_clock):
        after_first = docsign_service.sign(sent_id, 1)
        assert after_first.status is DocumentStatus.PENDING
        assert after_first.recipient(1).status is RecipientStatus.SIGNED
        assert after_first.recipient(1).signed_at == deterministic_clock.now()

        done = docsign_service.sign(sent_id, 2)
        assert done.status is DocumentStatus.COMPLETED
        assert docsign_service.get(sent_id).status is DocumentStatus.COMPLETED

    def test_out_of_order_rejected(self, docsign_service, sent_id):
        with pytest.raises(InvalidTransitionError) as exc_info:
            docsign_service.sign(sent_id, 2)
        assert "Ada Obi" in exc_info.value.reason
        assert docsign_service.get(sent_id).recipient(2).status is RecipientStatus.PENDING

    def test_cannot_sign_twice(self, docsign_service, sent_id):
        docsign_service.sign(sent_id, 1)
        with pytest.raises(InvalidTransitionError):
            docsign_service.sign(sent_id, 1)

    def test_unknown_recipient(self, docsign_service, sent_id):
        with pytest.raises(NotFoundError):
            docsign_service.sign(sent_id, 7)


class TestParallelSigning:
    @pytest.fixture
    def parallel_id(self, docsign_service, composer):
        composer.signing_mode = SigningMode.PARALLEL
        return docsign_service.send_request(composer, uploaded_by="hr@example.com")

    def test_any_order(self, docsign_service, parallel_id):
        assert docsign_service.sign(parallel_id, 2).status is DocumentStatus.PENDING
        assert docsign_service.sign(parallel_id, 1).status is DocumentStatus.COMPLETED


class TestDecline:
    def test_decline_ends_request(self, docsign_service, sent_id):
        declined = docsign_service.decline(sent_id, 1, reason="Wrong salary figure")
        assert declined.status is DocumentStatus.DECLINED
        assert declined.recipient(1).decline_reason == "Wrong salary figure"

    def test_no_signing_after_decline(self, docsign_service, sent_id):
        docsign_service.decline(sent_id, 1)
        with pytest.raises(InvalidTransitionError):
            docsign_service.sign(sent_id, 2)

    def test_completed_is_terminal(self, docsign_service, sent_id):
        docsign_service.sign(sent_id, 1)
        docsign_service.sign(sent_id, 2)
        with pytest.raises(InvalidTransitionError):
            docsign_service.decline(sent_id, 2)
