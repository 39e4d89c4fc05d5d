from datetime import date

from govwatch.models.legislation import LegislationRecord, LegislationStatus
from govwatch.utils.dedupe import dedupe_by_key
from govwatch.utils.hash_utils import compute_record_hash, short_hash


def _make_ordinance(external_id: str, title: str) -> LegislationRecord:
    """Helper to create a minimal ordinance for hashing tests."""
    return LegislationRecord(
        external_id=external_id,
        title=title,
        status=LegislationStatus.PASSED,
        introduced_at=date(2025, 9, 12),
    )


def test_compute_record_hash_ignores_external_id() -> None:
    first = _make_ordinance("ORD-2025-001", "Amending City Code Chapter 25-2")
    renamed = first.model_copy(update={"external_id": "ord-2025-001"})

    assert compute_record_hash(first) == compute_record_hash(renamed)


def test_compute_record_hash_detects_content_changes() -> None:
    original = _make_ordinance("ORD-2025-002", "Original Title")
    updated = _make_ordinance("ORD-2025-002", "Updated Title")

    assert compute_record_hash(original) != compute_record_hash(updated)


def test_compute_record_hash_detects_status_changes() -> None:
    introduced = _make_ordinance("ORD-2025-003", "Budget").model_copy(
        update={"status": LegislationStatus.INTRODUCED}
    )

    assert compute_record_hash(introduced) != compute_record_hash(_make_ordinance("ORD-2025-003", "Budget"))


def test_dedupe_by_key_removes_duplicates() -> None:
    first = _make_ordinance("ORD-1", "Act A")
    repeat = _make_ordinance("ORD-1", "Act A (repeat)")
    other = _make_ordinance("ORD-2", "Act B")

    unique, duplicates = dedupe_by_key([first, repeat, other], lambda record: record.external_id)

    assert duplicates == 1
    assert unique == [first, other]


def test_short_hash_is_stable() -> None:
    assert short_hash("austin") == short_hash("austin")
    assert len(short_hash("austin", length=8)) == 8
