import os
import tempfile
import threading
import unittest

import pytest
from sqlalchemy.exc import OperationalError

from donphone import create_app
from donphone.extensions import db
from donphone.services import document_store, sequence_service
from donphone.services.sequence_service import SALE, SERVICE_ORDER, SequenceUnavailable


def test_first_sale_number_is_start_plus_one(db_session):
    assert sequence_service.current_value(SALE) is None

    assert sequence_service.next_value(SALE) == 150
    assert sequence_service.next_value(SALE) == 151
    assert sequence_service.current_value(SALE) == 151


def test_counter_is_stored_in_system_settings(db_session):
    sequence_service.next_value(SERVICE_ORDER)

    body = document_store.get_document_data("systemSettings", "serviceOrdersCounter")
    assert body == {"id": "serviceOrdersCounter", "lastOsNumber": 201}


def test_sequences_are_independent(db_session):
    assert sequence_service.next_value(SALE) == 150
    assert sequence_service.next_value(SERVICE_ORDER) == 201
    assert sequence_service.next_value(SALE) == 151
    assert sequence_service.next_value(SERVICE_ORDER) == 202


def test_continues_from_stored_value(db_session):
    document_store.set_document("systemSettings", "salesCounter", {"lastSaleNumber": 150})

    issued = {sequence_service.next_value(SALE), sequence_service.next_value(SALE)}

    assert issued == {151, 152}
    assert sequence_service.current_value(SALE) == 152


def test_counter_document_keeps_other_fields(db_session):
    document_store.set_document("systemSettings", "salesCounter", {"lastSaleNumber": 10, "note": "migrated"})

    sequence_service.next_value(SALE)

    body = document_store.get_document_data("systemSettings", "salesCounter")
    assert body["lastSaleNumber"] == 11
    assert body["note"] == "migrated"


def test_start_comes_from_config(db_session, config_override, app):
    sequences = {key: dict(value) for key, value in app.config["SEQUENCES"].items()}
    sequences[SALE]["start"] = 0
    config_override(SEQUENCES=sequences)

    assert sequence_service.next_value(SALE) == 1


def test_unknown_sequence_is_unavailable(db_session):
    with pytest.raises(SequenceUnavailable) as exc_info:
        sequence_service.next_value("invoice")

    assert exc_info.value.sequence_name == "invoice"


def test_storage_failure_raises_unavailable_and_keeps_counter(db_session, monkeypatch, config_override):
    sequence_service.next_value(SALE)
    config_override(SEQUENCE_RETRY_ATTEMPTS=2)

    def locked(query):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(sequence_service, "lock_for_update", locked)
    monkeypatch.setattr("donphone.services.concurrency.time.sleep", lambda seconds: None)

    with pytest.raises(SequenceUnavailable):
        sequence_service.next_value(SALE)

    monkeypatch.undo()
    assert sequence_service.current_value(SALE) == 150


def test_pending_caller_changes_are_not_discarded(db_session):
    document_store.add_document("sales", {"draft": True}, doc_id="pending", commit=False)

    with pytest.raises(SequenceUnavailable):
        sequence_service.next_value(SALE)

    db_session.commit()
    assert document_store.get_document_data("sales", "pending") == {"id": "pending", "draft": True}
    assert sequence_service.current_value(SALE) is None


class SequenceConcurrencyTests(unittest.TestCase):
    """Several threads issuing numbers against one file-backed database."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        db_path = os.path.join(self.tmpdir.name, "sequences.db")
        self.app = create_app({
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
            "SEQUENCE_RETRY_ATTEMPTS": 10,
        })
        with self.app.app_context():
            db.drop_all()
            db.create_all()

    def tearDown(self):
        with self.app.app_context():
            db.session.remove()
            db.drop_all()
            db.session.remove()
            db.engine.dispose()
        self.tmpdir.cleanup()

    def _issue_concurrently(self, sequence_name, count):
        issued = []
        errors = []
        lock = threading.Lock()

        def worker():
            with self.app.app_context():
                try:
                    value = sequence_service.next_value(sequence_name)
                    with lock:
                        issued.append(value)
                except Exception as exc:
                    with lock:
                        errors.append(exc)
                finally:
                    db.session.remove()

        threads = [threading.Thread(target=worker) for _ in range(count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        return issued, errors

    def test_two_callers_get_consecutive_distinct_numbers(self):
        with self.app.app_context():
            document_store.set_document("systemSettings", "salesCounter", {"lastSaleNumber": 150})

        issued, errors = self._issue_concurrently(SALE, 2)

        self.assertFalse(errors)
        self.assertEqual(set(issued), {151, 152})
        with self.app.app_context():
            self.assertEqual(sequence_service.current_value(SALE), 152)

    def test_many_callers_on_a_fresh_counter(self):
        issued, errors = self._issue_concurrently(SERVICE_ORDER, 10)

        self.assertFalse(errors)
        self.assertEqual(sorted(issued), list(range(201, 211)))
        with self.app.app_context():
            self.assertEqual(sequence_service.current_value(SERVICE_ORDER), 210)


if __name__ == "__main__":
    unittest.main()
