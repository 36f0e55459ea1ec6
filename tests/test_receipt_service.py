"""Tests for the receipt service enrichment workflow."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from domeal.errors import (
    EmptyResponseError,
    EnrichmentError,
    Forbidden,
    NotFound,
    OCRConfigError,
    PersistenceError,
    StorageConfigError,
    TransportError,
    ValidationError,
)
from domeal.models.enums import OcrStatus
from domeal.models.receipt import PurchaseItem, Receipt
from domeal.services.ocr_service import OCRService
from domeal.services.receipt_service import (
    EnrichmentCompleted,
    EnrichmentSkipped,
    ReceiptService,
    SkipReason,
    parse_group_id,
    parse_ocr_result,
)


@pytest.fixture
def setup(db, make_user, make_group):
    """Create a member, a group and a pending receipt."""
    member, _ = make_user(user_id=7)
    outsider, _ = make_user(user_id=9)
    group = make_group(group_id=42, owner_id=member.id)
    receipt = Receipt(group_id=group.id, file_key="42/receipt.png", uploaded_by=member.id)
    db.add(receipt)
    db.commit()
    return {"member": member, "outsider": outsider, "receipt_id": receipt.id}


@pytest.fixture
def mock_ocr():
    return MagicMock(spec=OCRService)


@pytest.fixture
def service(db, storage_service, mock_ocr):
    return ReceiptService(db, storage=storage_service, ocr=mock_ocr)


def test_parse_ocr_result_defaults():
    """Missing quantity becomes 1 and missing predict_name becomes empty."""
    data = parse_ocr_result('{"items":[{"name":"Coffee","price":3.5}]}')

    assert len(data.items) == 1
    assert data.items[0].name == "Coffee"
    assert data.items[0].predict_name == ""
    assert data.items[0].quantity == 1


def test_parse_ocr_result_strips_code_fence():
    """Replies wrapped in a markdown code block still parse."""
    raw = '```json\n{"date": "2026/10/18", "total": 550, "items": [{"name": "Tea", "price": 150, "quantity": 2}]}\n```'
    data = parse_ocr_result(raw)

    assert data.total == 550
    assert data.items[0].quantity == 2


def test_parse_ocr_result_zero_quantity_counts_as_one():
    """Non-positive quantities are normalized to one."""
    data = parse_ocr_result('{"items":[{"name":"Tea","price":1,"quantity":0}]}')
    assert data.items[0].quantity == 1


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        '{"items":[{"name":"Tea","price":-1}]}',
        '{"items":[{"price":1}]}',
        "[1, 2, 3]",
        '{"items":[{"name":"Tea","price":Infinity}]}',
        '{"items":[{"name":"Tea","price":1,"quantity":2147483648}]}',
    ],
)
def test_parse_ocr_result_rejects_bad_payloads(raw):
    """Anything that is not the receipt schema is an enrichment error."""
    with pytest.raises(EnrichmentError):
        parse_ocr_result(raw)


@pytest.mark.parametrize("raw", ["42", 42, " 7 "])
def test_parse_group_id(raw):
    assert parse_group_id(raw) in (42, 7)


@pytest.mark.parametrize(
    "raw", [None, "", "4.2", "x", "0", "+42", "-42", "4_2", "٤٢", "2147483648"]
)
def test_parse_group_id_invalid(raw):
    with pytest.raises(ValidationError):
        parse_group_id(raw)


def test_confirm_upload_completed(db, service, mock_ocr, setup):
    """Successful OCR returns the persisted items."""
    mock_ocr.extract.return_value = '{"items":[{"name":"Coffee","price":3.5,"quantity":1}]}'

    result = service.confirm_upload(setup["member"], setup["receipt_id"])

    assert result.status == "uploaded"
    assert isinstance(result.enrichment, EnrichmentCompleted)
    assert [item.item_name for item in result.enrichment.items] == ["Coffee"]
    assert db.get(Receipt, setup["receipt_id"]).ocr_status == OcrStatus.COMPLETED.value


@pytest.mark.parametrize(
    ("side_effect", "reason"),
    [
        (TransportError("network down"), SkipReason.OCR_FAILED),
        (EmptyResponseError(), SkipReason.OCR_FAILED),
        (OCRConfigError(), SkipReason.OCR_UNAVAILABLE),
    ],
)
def test_confirm_upload_skip_reasons(db, service, mock_ocr, setup, side_effect, reason):
    """Each OCR failure mode is reported as a tagged skip."""
    mock_ocr.extract.side_effect = side_effect

    result = service.confirm_upload(setup["member"], setup["receipt_id"])

    assert isinstance(result.enrichment, EnrichmentSkipped)
    assert result.enrichment.reason == reason
    receipt = db.get(Receipt, setup["receipt_id"])
    assert receipt.is_uploaded is True
    assert receipt.ocr_status == OcrStatus.PENDING.value


def test_confirm_upload_unparseable(db, service, mock_ocr, setup):
    """An unparseable payload is skipped with its reason."""
    mock_ocr.extract.return_value = "I could not read the receipt."

    result = service.confirm_upload(setup["member"], setup["receipt_id"])

    assert result.enrichment.reason == SkipReason.UNPARSEABLE
    assert db.query(PurchaseItem).count() == 0


def test_confirm_upload_storage_unconfigured(db, service, mock_ocr, setup):
    """Without a bucket there is no image URL, so OCR is skipped."""
    service.storage.settings.s3_bucket_name = None

    result = service.confirm_upload(setup["member"], setup["receipt_id"])

    assert result.enrichment == EnrichmentSkipped(SkipReason.OCR_UNAVAILABLE, "S3 configuration error")
    mock_ocr.extract.assert_not_called()
    assert db.get(Receipt, setup["receipt_id"]).is_uploaded is True


def test_confirm_upload_already_completed(db, service, mock_ocr, setup):
    """A completed receipt is not enriched again."""
    receipt = db.get(Receipt, setup["receipt_id"])
    receipt.ocr_status = OcrStatus.COMPLETED.value
    db.commit()

    result = service.confirm_upload(setup["member"], setup["receipt_id"])

    assert result.enrichment.reason == SkipReason.ALREADY_COMPLETED
    mock_ocr.extract.assert_not_called()


def test_confirm_upload_forbidden(service, mock_ocr, setup):
    with pytest.raises(Forbidden):
        service.confirm_upload(setup["outsider"], setup["receipt_id"])
    mock_ocr.extract.assert_not_called()


def test_confirm_upload_not_found(service, setup):
    with pytest.raises(NotFound):
        service.confirm_upload(setup["member"], 424242)


def test_issue_upload_credential_storage_error(db, service, setup):
    """Signing fails before any receipt row is written."""
    service.storage.settings.aws_access_key_id = None
    before = db.query(Receipt).count()

    with pytest.raises(StorageConfigError):
        service.issue_upload_credential(setup["member"], "42")

    assert db.query(Receipt).count() == before


@pytest.mark.parametrize(
    ("current", "target", "allowed"),
    [
        (OcrStatus.PENDING, OcrStatus.COMPLETED, True),
        (OcrStatus.UPLOADED, OcrStatus.COMPLETED, True),
        (OcrStatus.COMPLETED, OcrStatus.PENDING, False),
        (OcrStatus.COMPLETED, OcrStatus.UPLOADED, False),
    ],
)
def test_ocr_status_is_monotonic(current, target, allowed):
    assert current.can_transition_to(target) is allowed


def test_issue_upload_credential_insert_failure(db, service, setup):
    """A failed receipt insert is rolled back and reported as a persistence error."""
    before = db.query(Receipt).count()

    def fail_insert(mapper, connection, target):
        raise OperationalError("INSERT INTO receipts", {}, Exception("disk I/O error"))

    event.listen(Receipt, "before_insert", fail_insert)
    try:
        with pytest.raises(PersistenceError):
            service.issue_upload_credential(setup["member"], "42")
    finally:
        event.remove(Receipt, "before_insert", fail_insert)

    assert db.query(Receipt).count() == before
