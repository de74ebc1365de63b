"""
Tests for the signature request composer.

Validates:
- Initial recipient, sequential ids/orders, round-robin palette colors
- Field placement defaults (first recipient, required flag, per-type size)
- Reassignment rules, including the no-op for unknown recipients
- Recipient removal renumbers orders and re-homes orphaned fields
- Upload and send validation
"""

import pytest

from steps_kernel.exceptions import NotFoundError, ValidationError
from steps_modules.docsign.composer import SignatureComposer
from steps_modules.docsign.models import DocumentStatus, FieldType, Size


@pytest.fixture
def composer(app_config) -> SignatureComposer:
    return SignatureComposer(app_config.docsign)


def _ready(composer: SignatureComposer) -> SignatureComposer:
    composer.update_recipient(1, name="Ada Obi", email="ada@example.com")
    composer.upload_document("contract.pdf", 2048, "application/pdf")
    return composer


class TestRecipients:
    def test_starts_with_one_empty_recipient(self, composer):
        (first,) = composer.recipients
        assert (first.id, first.order, first.color) == (1, 1, "blue")
        assert first.name == "" and first.email == ""

    def test_palette_round_robin(self, composer):
        added = [composer.add_recipient() for _ in range(5)]
        assert [r.color for r in added] == ["purple", "green", "orange", "teal", "blue"]
        assert [r.order for r in composer.recipients] == [1, 2, 3, 4, 5, 6]
        assert [r.id for r in composer.recipients] == [1, 2, 3, 4, 5, 6]

    def test_duplicate_emails_allowed(self, composer):
        composer.update_recipient(1, name="A", email="same@example.com")
        composer.add_recipient("B", "same@example.com")
        assert len(composer.recipients) == 2

    def test_update_unknown_recipient(self, composer):
        with pytest.raises(NotFoundError):
            composer.update_recipient(42, name="x")

    def test_remove_renumbers_orders(self, composer):
        composer.add_recipient("B", "b@example.com")
        composer.add_recipient("C", "c@example.com")
        composer.remove_recipient(2)
        assert [(r.id, r.order) for r in composer.recipients] == [(1, 1), (3, 2)]

    def test_ids_not_reused_after_removal(self, composer):
        composer.add_recipient()
        composer.add_recipient()
        composer.remove_recipient(2)
        assert composer.add_recipient().id == 4


class TestFields:
    def test_defaults_to_first_recipient(self, composer):
        composer.add_recipient("B", "b@example.com")
        placed = composer.place_field(FieldType.SIGNATURE, page=1, position=(10, 20))
        assert placed.assigned_to == 1
        assert placed.label == "Signature"

    @pytest.mark.parametrize(
        "field_type, required, size",
        [
            (FieldType.SIGNATURE, True, Size(220, 50)),
            (FieldType.INITIALS, True, Size(100, 50)),
            (FieldType.DATE_SIGNED, False, Size(180, 50)),
            (FieldType.TEXTBOX, False, Size(200, 40)),
            (FieldType.CHECKBOX, False, Size(30, 30)),
            (FieldType.FULL_NAME, False, Size(200, 40)),
        ],
    )
    def test_required_and_size_by_type(self, composer, field_type, required, size):
        placed = composer.place_field(field_type, page=2, position=(50, 50))
        assert placed.required is required
        assert placed.size == size

    def test_size_falls_back_to_default_without_configured_sizes(self):
        placed = SignatureComposer().place_field("textbox", page=1, position=(0, 0))
        assert placed.size == Size(180, 50)

    def test_explicit_assignee(self, composer):
        second = composer.add_recipient("B", "b@example.com")
        placed = composer.place_field("initials", page=1, position=(5, 5), assigned_to=second.id)
        assert placed.assigned_to == second.id

    def test_unknown_explicit_assignee_rejected(self, composer):
        with pytest.raises(ValidationError):
            composer.place_field("initials", page=1, position=(5, 5), assigned_to=9)

    def test_position_outside_page_rejected(self, composer):
        with pytest.raises(ValidationError) as exc_info:
            composer.place_field("signature", page=1, position=(120, 5))
        assert exc_info.value.field == "position"

    def test_reassign_to_unknown_recipient_is_noop(self, composer):
        placed = composer.place_field("signature", page=1, position=(10, 10))
        assert composer.reassign_field(placed.id, 99).assigned_to == 1

    def test_reassign(self, composer):
        second = composer.add_recipient("B", "b@example.com")
        placed = composer.place_field("signature", page=1, position=(10, 10))
        assert composer.reassign_field(placed.id, second.id).assigned_to == second.id

    def test_reposition(self, composer):
        placed = composer.place_field("signature", page=1, position=(10, 10))
        moved = composer.reposition_field(placed.id, page=3, position=(40, 60))
        assert (moved.page, moved.position.x, moved.position.y) == (3, 40, 60)

    def test_toggle_required_and_remove(self, composer):
        placed = composer.place_field("textbox", page=1, position=(10, 10))
        assert composer.toggle_required(placed.id).required is True
        composer.remove_field(placed.id)
        assert composer.fields == ()
        with pytest.raises(NotFoundError):
            composer.toggle_required(placed.id)

    def test_removed_recipient_fields_move_to_first_remaining(self, composer):
        second = composer.add_recipient("B", "b@example.com")
        placed = composer.place_field("signature", page=1, position=(1, 1), assigned_to=second.id)
        composer.remove_recipient(second.id)
        assert composer.fields[0].id == placed.id
        assert composer.fields[0].assigned_to == 1

    def test_removing_last_recipient_deletes_its_fields(self, composer):
        composer.place_field("signature", page=1, position=(1, 1))
        composer.remove_recipient(1)
        assert composer.recipients == ()
        assert composer.fields == ()

    def test_place_without_recipients_rejected(self, composer):
        composer.remove_recipient(1)
        with pytest.raises(ValidationError):
            composer.place_field("signature", page=1, position=(1, 1))


class TestUpload:
    def test_subject_prefilled(self, composer):
        composer.upload_document("lease.pdf", 1000, "application/pdf")
        assert composer.subject == "Please sign: lease.pdf"

    def test_existing_subject_kept(self, composer):
        composer.subject = "Lease renewal"
        composer.upload_document("lease.pdf", 1000, "application/pdf")
        assert composer.subject == "Lease renewal"

    def test_non_pdf_rejected(self, composer):
        with pytest.raises(ValidationError):
            composer.upload_document("photo.png", 1000, "image/png")
        assert composer.file_name is None

    def test_size_limit(self, composer):
        composer.upload_document("big.pdf", 10 * 1024 * 1024, "application/pdf")
        with pytest.raises(ValidationError):
            composer.upload_document("bigger.pdf", 10 * 1024 * 1024 + 1, "application/pdf")


class TestBuildDocument:
    def test_requires_upload(self, composer):
        composer.update_recipient(1, name="Ada", email="ada@example.com")
        composer.subject = "Sign"
        with pytest.raises(ValidationError) as exc_info:
            composer.build_document("hr@example.com")
        assert exc_info.value.field == "file"

    def test_requires_recipient_with_name_and_email(self, composer):
        composer.update_recipient(1, name="Ada")
        composer.upload_document("contract.pdf", 10, "application/pdf")
        with pytest.raises(ValidationError) as exc_info:
            composer.build_document("hr@example.com")
        assert exc_info.value.field == "recipients"

    def test_requires_subject(self, composer):
        _ready(composer)
        composer.subject = "   "
        with pytest.raises(ValidationError) as exc_info:
            composer.build_document("hr@example.com")
        assert exc_info.value.field == "subject"

    def test_only_valid_recipients_kept(self, composer):
        _ready(composer)
        blank = composer.add_recipient()
        composer.add_recipient("C", "c@example.com")
        orphan = composer.place_field("signature", page=1, position=(1, 1), assigned_to=blank.id)

        document = composer.build_document("hr@example.com")

        assert document.status is DocumentStatus.PENDING
        assert [(r.id, r.order) for r in document.recipients] == [(1, 1), (3, 2)]
        assert {f.id: f.assigned_to for f in document.fields} == {orphan.id: 1}
        assert document.subject == "Please sign: contract.pdf"
        assert document.file_size == 2048
