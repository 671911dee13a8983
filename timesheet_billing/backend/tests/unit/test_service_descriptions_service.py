"""Service tests for the service description lifecycle."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from timesheet_billing.backend.src.core.errors import (
    BillingError,
    CannotDeleteFinalized,
    DiscountTooLarge,
    DocumentFinalized,
    InvalidDiscount,
    InvalidPeriod,
    InvalidRetainer,
    InvalidStatus,
    NotFound,
)
from timesheet_billing.backend.src.db import session_scope
from timesheet_billing.backend.src.models import ServiceDescription, TimeEntry
from timesheet_billing.backend.src.services import line_items as line_item_service
from timesheet_billing.backend.src.services import service_descriptions as service

PERIOD = (date(2026, 1, 1), date(2026, 2, 28))


def _create(client_id: int) -> ServiceDescription:
    with session_scope() as session:
        return service.create_service_description(session, client_id, *PERIOD)


def _load(document_id: int) -> ServiceDescription:
    with session_scope() as session:
        document = service.get_service_description(session, document_id)
        for topic in document.topics:
            list(topic.line_items)
        return document


def _written_off(time_entry_id: int) -> bool:
    with session_scope() as session:
        return session.get(TimeEntry, time_entry_id).is_written_off


def _first_item(document_id: int):  # type: ignore[no-untyped-def]
    document = _load(document_id)
    topic = document.topics[0]
    return topic.id, topic.line_items[0]


def test_create_groups_unbilled_entries_by_topic(billing_data: dict[str, object]) -> None:
    client = billing_data["client"]

    created = _create(client.id)
    document = _load(created.id)

    assert document.status == "DRAFT"
    assert [topic.topic_name for topic in document.topics] == ["Corporate", "Other"]
    assert [topic.display_order for topic in document.topics] == [0, 1]
    corporate = document.topics[0]
    assert corporate.pricing_mode == "HOURLY"
    assert corporate.hourly_rate == Decimal("150.00")
    assert [item.description for item in corporate.line_items] == [
        "Call with client",
        "Draft share purchase agreement",
    ]
    assert [item.display_order for item in corporate.line_items] == [0, 1]


def test_create_skips_entries_before_billing_start(billing_data: dict[str, object]) -> None:
    early_entry = billing_data["entries"][3]

    document = _load(_create(billing_data["client"].id).id)

    referenced = {item.time_entry_id for topic in document.topics for item in topic.line_items}
    assert early_entry.id not in referenced
    assert len(referenced) == 3


def test_create_skips_entries_on_finalized_documents(billing_data: dict[str, object]) -> None:
    client = billing_data["client"]
    first = _create(client.id)
    with session_scope() as session:
        service.finalize_service_description(session, first.id)

    second = _load(_create(client.id).id)

    assert second.topics == []


def test_create_rejects_inverted_period(billing_data: dict[str, object]) -> None:
    with session_scope() as session:
        with pytest.raises(InvalidPeriod):
            service.create_service_description(
                session, billing_data["client"].id, date(2026, 3, 1), date(2026, 2, 1)
            )


def test_create_rejects_unknown_client(billing_data: dict[str, object]) -> None:
    with session_scope() as session:
        with pytest.raises(NotFound) as exc_info:
            service.create_service_description(session, 9999, *PERIOD)
    assert exc_info.value.detail == "Client not found"


def test_finalize_records_actor_and_unlock_clears_it(billing_data: dict[str, object]) -> None:
    partner = billing_data["partner"]
    created = _create(billing_data["client"].id)

    with session_scope() as session:
        finalized = service.finalize_service_description(session, created.id, partner)
    assert finalized.status == "FINALIZED"
    assert finalized.finalized_at is not None
    assert finalized.finalized_by_id == partner.id

    with session_scope() as session:
        unlocked = service.unlock_service_description(session, created.id, partner)
    assert unlocked.status == "DRAFT"
    assert unlocked.finalized_at is None
    assert unlocked.finalized_by_id is None


def test_finalize_twice_reports_already_finalized(billing_data: dict[str, object]) -> None:
    created = _create(billing_data["client"].id)
    with session_scope() as session:
        service.finalize_service_description(session, created.id)

    with session_scope() as session:
        with pytest.raises(DocumentFinalized):
            service.finalize_service_description(session, created.id)


def test_empty_document_can_be_finalized(billing_data: dict[str, object]) -> None:
    with session_scope() as session:
        created = service.create_service_description(
            session, billing_data["client"].id, date(2026, 6, 1), date(2026, 6, 30)
        )
    with session_scope() as session:
        finalized = service.finalize_service_description(session, created.id)
    assert finalized.status == "FINALIZED"


def test_invalid_status_is_rejected(billing_data: dict[str, object]) -> None:
    created = _create(billing_data["client"].id)
    with session_scope() as session:
        with pytest.raises(InvalidStatus):
            service.update_service_description(session, created.id, {"status": "ARCHIVED"})


def test_status_cannot_be_combined_with_settings(billing_data: dict[str, object]) -> None:
    created = _create(billing_data["client"].id)
    with session_scope() as session:
        with pytest.raises(InvalidStatus):
            service.update_service_description(
                session,
                created.id,
                {"status": "FINALIZED", "discount_type": "AMOUNT", "discount_value": Decimal("5")},
            )


def test_document_discount_is_validated_and_stored(billing_data: dict[str, object]) -> None:
    created = _create(billing_data["client"].id)

    with session_scope() as session:
        with pytest.raises(DiscountTooLarge):
            service.update_service_description(
                session,
                created.id,
                {"discount_type": "PERCENTAGE", "discount_value": Decimal("150")},
            )
    with session_scope() as session:
        with pytest.raises(InvalidDiscount):
            service.update_service_description(session, created.id, {"discount_value": Decimal("10")})

    with session_scope() as session:
        updated = service.update_service_description(
            session,
            created.id,
            {"discount_type": "PERCENTAGE", "discount_value": Decimal("12.5")},
        )
    assert updated.discount_type == "PERCENTAGE"
    assert updated.discount_value == Decimal("12.5")

    with session_scope() as session:
        cleared = service.update_service_description(session, created.id, {"discount_type": None})
    assert cleared.discount_type is None
    assert cleared.discount_value is None


def test_discount_change_on_finalized_document_is_rejected(billing_data: dict[str, object]) -> None:
    created = _create(billing_data["client"].id)
    with session_scope() as session:
        service.finalize_service_description(session, created.id)

    with session_scope() as session:
        with pytest.raises(DocumentFinalized) as exc_info:
            service.update_service_description(
                session, created.id, {"discount_type": "AMOUNT", "discount_value": Decimal("100")}
            )
    assert exc_info.value.detail == "Cannot modify finalized service description"
    assert _load(created.id).discount_type is None


def test_retainer_values_must_be_positive(billing_data: dict[str, object]) -> None:
    created = _create(billing_data["client"].id)

    with session_scope() as session:
        with pytest.raises(InvalidRetainer):
            service.update_service_description(session, created.id, {"retainer_fee": Decimal("-1")})

    with session_scope() as session:
        updated = service.update_service_description(
            session,
            created.id,
            {"retainer_fee": Decimal("2000"), "retainer_hours": Decimal("10")},
        )
    assert updated.retainer_fee == Decimal("2000")
    assert updated.retainer_hours == Decimal("10")


def test_empty_update_is_rejected(billing_data: dict[str, object]) -> None:
    created = _create(billing_data["client"].id)
    with session_scope() as session:
        with pytest.raises(BillingError) as exc_info:
            service.update_service_description(session, created.id, {})
    assert exc_info.value.detail == "No update fields provided"


def test_delete_clears_write_off_held_only_by_deleted_document(
    billing_data: dict[str, object],
) -> None:
    created = _create(billing_data["client"].id)
    topic_id, item = _first_item(created.id)
    with session_scope() as session:
        line_item_service.waive_line_item(session, created.id, topic_id, item.id, "ZERO")
    assert _written_off(item.time_entry_id) is True

    with session_scope() as session:
        service.delete_service_description(session, created.id)

    assert _written_off(item.time_entry_id) is False
    with session_scope() as session:
        assert session.get(ServiceDescription, created.id) is None


def test_delete_keeps_write_off_waived_elsewhere(billing_data: dict[str, object]) -> None:
    client_id = billing_data["client"].id
    first = _create(client_id)
    second = _create(client_id)
    for document_id in (first.id, second.id):
        topic_id, item = _first_item(document_id)
        with session_scope() as session:
            line_item_service.waive_line_item(session, document_id, topic_id, item.id, "EXCLUDED")

    with session_scope() as session:
        service.delete_service_description(session, first.id)

    assert _written_off(item.time_entry_id) is True


def test_delete_finalized_document_is_rejected(billing_data: dict[str, object]) -> None:
    created = _create(billing_data["client"].id)
    with session_scope() as session:
        service.finalize_service_description(session, created.id)

    with session_scope() as session:
        with pytest.raises(CannotDeleteFinalized):
            service.delete_service_description(session, created.id)

    assert _load(created.id).status == "FINALIZED"


def test_delete_missing_document_is_not_found(billing_data: dict[str, object]) -> None:
    with session_scope() as session:
        with pytest.raises(NotFound):
            service.delete_service_description(session, 4242)


def test_unbilled_summary_reports_hours_value_and_draft(billing_data: dict[str, object]) -> None:
    with session_scope() as session:
        before = service.unbilled_summary(session)
    assert len(before) == 1
    summary = before[0]
    assert summary.client_name == "Acme Holdings"
    assert summary.total_unbilled_hours == 4.0
    assert summary.estimated_value == 600.0
    assert summary.oldest_entry_date == date(2026, 2, 3)
    assert summary.newest_entry_date == date(2026, 2, 12)
    assert summary.existing_draft is None

    created = _create(billing_data["client"].id)
    with session_scope() as session:
        after = service.unbilled_summary(session)
    assert after[0].existing_draft is not None
    assert after[0].existing_draft.id == created.id


def test_list_returns_documents_with_loaded_topics(billing_data: dict[str, object]) -> None:
    created = _create(billing_data["client"].id)

    with session_scope() as session:
        documents = service.list_service_descriptions(session)
        assert [document.id for document in documents] == [created.id]
        assert len(documents[0].topics) == 2
