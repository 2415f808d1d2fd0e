from datetime import datetime, timezone

import pytest

from donphone.services import document_store, sequence_service, service_order_service as os_service
from donphone.services.sequence_service import SequenceUnavailable
from donphone.validation import NotFoundError, ValidationError


def _payload(**overrides):
    payload = {
        "clientName": "João Silva",
        "clientPhone": "(11) 99999-0000",
        "deviceType": "Celular",
        "deviceBrandModel": "Moto G84",
        "problemReportedByClient": "Tela quebrada",
        "serviceManualValue": 250,
        "additionalSoldProducts": [
            {"name": "Película", "quantity": 2, "unitPrice": "20,00"},
        ],
    }
    payload.update(overrides)
    return payload


def test_open_order_gets_number_and_totals(db_session):
    order = os_service.add_service_order(_payload())

    assert order["osNumber"] == 201
    assert order["status"] == os_service.STATUS_OPEN
    assert order["additionalSoldProducts"] == [
        {"name": "Película", "quantity": 2, "unitPrice": 20.0, "totalPrice": 40.0},
    ]
    assert order["grandTotalValue"] == 290.0
    assert order["openingDate"] == order["updatedAt"]


def test_required_fields(db_session):
    with pytest.raises(ValidationError):
        os_service.add_service_order(_payload(problemReportedByClient=""))
    with pytest.raises(ValidationError):
        os_service.add_service_order(_payload(deviceType="Geladeira"))

    assert sequence_service.current_value(sequence_service.SERVICE_ORDER) is None


def test_nothing_is_stored_when_the_number_cannot_be_issued(db_session, monkeypatch):
    def unavailable(name):
        raise SequenceUnavailable(name)

    monkeypatch.setattr(sequence_service, "next_value", unavailable)

    with pytest.raises(SequenceUnavailable):
        os_service.add_service_order(_payload())

    assert document_store.count_documents(os_service.SERVICE_ORDERS) == 0


def test_update_recomputes_grand_total(db_session):
    order = os_service.add_service_order(_payload())

    updated = os_service.update_service_order(order["id"], {
        "serviceManualValue": 300,
        "status": os_service.STATUS_COMPLETED,
        "technicalDiagnosis": "Display danificado",
    })

    assert updated["grandTotalValue"] == 340.0
    assert updated["osNumber"] == 201
    assert updated["technicalDiagnosis"] == "Display danificado"


def test_list_orders_by_number_and_delete(db_session):
    first = os_service.add_service_order(_payload())
    os_service.add_service_order(_payload(clientName="Maria"))

    assert [o["osNumber"] for o in os_service.list_service_orders()] == [202, 201]

    os_service.delete_service_order(first["id"])
    with pytest.raises(NotFoundError):
        os_service.get_service_order(first["id"])
    with pytest.raises(NotFoundError):
        os_service.delete_service_order(first["id"])


def test_open_count_and_revenue(db_session):
    statuses = ["Aberta", "Em andamento", "Aguardando peça", "Concluída", "Entregue", "Cancelada"]
    for status in statuses:
        os_service.add_service_order(_payload(status=status, serviceManualValue=100, additionalSoldProducts=[]))

    assert os_service.count_open_service_orders() == 3
    assert os_service.get_completed_service_orders_revenue() == 200.0


def test_date_range_with_status(db_session):
    june = datetime(2024, 6, 1, 12, tzinfo=timezone.utc)
    july = datetime(2024, 7, 1, 12, tzinfo=timezone.utc)
    document_store.add_document("serviceOrders", {"status": "Aberta", "openingDate": june}, doc_id="a")
    document_store.add_document("serviceOrders", {"status": "Entregue", "openingDate": june}, doc_id="b")
    document_store.add_document("serviceOrders", {"status": "Aberta", "openingDate": july}, doc_id="c")

    start = datetime(2024, 6, 1, tzinfo=timezone.utc)
    end = datetime(2024, 6, 30, tzinfo=timezone.utc)

    assert {o["id"] for o in os_service.get_service_orders_by_date_range(start, end)} == {"a", "b"}
    assert [o["id"] for o in os_service.get_service_orders_by_date_range(start, end, status="Aberta")] == ["a"]
    assert len(os_service.get_service_orders_by_date_range(start, end, status="all")) == 2
