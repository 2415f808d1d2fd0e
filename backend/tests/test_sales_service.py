from datetime import datetime, timedelta, timezone

import pytest

from donphone.services import document_store, sales_service, sequence_service
from donphone.services.sequence_service import SequenceUnavailable
from donphone.validation import ConflictError, NotFoundError, ValidationError

ITEMS = [
    {"name": "Película 3D", "quantity": 2, "price": "15,50"},
    {"name": "Carregador", "quantity": 1, "price": 49.9},
]


def test_sale_gets_next_number_and_computed_total(db_session):
    sale = sales_service.add_sale(items=ITEMS, payment_method="PIX", client_name="  Carla ")

    assert sale["saleNumber"] == 150
    assert sale["totalAmount"] == 80.9
    assert sale["status"] == sales_service.STATUS_COMPLETED
    assert sale["clientName"] == "Carla"
    assert sale["items"][0] == {"name": "Película 3D", "quantity": 2, "price": 15.5}

    stored = sales_service.get_sale(sale["id"])
    assert stored["saleNumber"] == 150
    assert stored["createdAt"] == sale["createdAt"]


def test_sales_are_listed_newest_number_first(db_session):
    for _ in range(3):
        sales_service.add_sale(items=ITEMS, payment_method="Dinheiro")

    numbers = [s["saleNumber"] for s in sales_service.list_sales()]
    assert numbers == [152, 151, 150]


def test_nothing_is_stored_when_the_number_cannot_be_issued(db_session, monkeypatch):
    def unavailable(name):
        raise SequenceUnavailable(name)

    monkeypatch.setattr(sequence_service, "next_value", unavailable)

    with pytest.raises(SequenceUnavailable):
        sales_service.add_sale(items=ITEMS, payment_method="PIX")

    assert document_store.count_documents(sales_service.SALES) == 0


@pytest.mark.parametrize("items, method", [
    ([], "PIX"),
    (None, "PIX"),
    ([{"name": "", "quantity": 1, "price": 1}], "PIX"),
    ([{"name": "Capa", "quantity": 0, "price": 1}], "PIX"),
    ([{"name": "Capa", "quantity": 1}], "PIX"),
    (ITEMS, "Cheque"),
])
def test_invalid_sales_are_rejected_before_numbering(db_session, items, method):
    with pytest.raises(ValidationError):
        sales_service.add_sale(items=items, payment_method=method)

    assert sequence_service.current_value(sequence_service.SALE) is None


def test_cancel_sale_keeps_the_document(db_session):
    sale = sales_service.add_sale(items=ITEMS, payment_method="Cartão de Débito")

    cancelled = sales_service.cancel_sale(sale["id"], "Cliente desistiu")

    assert cancelled["status"] == sales_service.STATUS_CANCELLED
    assert cancelled["cancellationReason"] == "Cliente desistiu"
    assert isinstance(cancelled["cancelledAt"], datetime)
    assert cancelled["saleNumber"] == 150

    with pytest.raises(ConflictError):
        sales_service.cancel_sale(sale["id"], "de novo")
    with pytest.raises(ValidationError):
        sales_service.cancel_sale(sale["id"], "   ")
    with pytest.raises(NotFoundError):
        sales_service.cancel_sale("missing", "x")


def test_revenue_counts_only_completed_sales(db_session):
    kept = sales_service.add_sale(items=[{"name": "A", "quantity": 1, "price": 100}], payment_method="PIX")
    dropped = sales_service.add_sale(items=[{"name": "B", "quantity": 1, "price": 40}], payment_method="PIX")
    sales_service.cancel_sale(dropped["id"], "erro")

    assert kept["totalAmount"] == 100.0
    assert sales_service.get_total_sales_revenue() == 100.0


def test_date_range_includes_the_whole_end_day(db_session):
    day = datetime(2024, 6, 10, tzinfo=timezone.utc)
    for doc_id, created in [
        ("before", day - timedelta(milliseconds=1)),
        ("start", day),
        ("late", day + timedelta(hours=23, minutes=59, seconds=59, milliseconds=999)),
        ("next", day + timedelta(days=1)),
    ]:
        document_store.add_document("sales", {"status": "Concluída", "createdAt": created}, doc_id=doc_id)

    found = sales_service.get_sales_by_date_range(day, day)

    assert [s["id"] for s in found] == ["late", "start"]
