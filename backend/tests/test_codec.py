from datetime import datetime, timezone

from donphone.codec import DATATYPE_KEY, deserialize_value, is_timestamp_tag, serialize_value


def test_datetime_leaves_are_tagged_at_every_depth():
    ts = datetime(2024, 3, 5, 14, 30, 0, 123000, tzinfo=timezone.utc)
    body = {
        "createdAt": ts,
        "items": [{"name": "Tela", "addedAt": ts}],
        "meta": {"nested": {"when": ts}},
        "total": 10.5,
    }

    encoded = serialize_value(body)

    tag = {DATATYPE_KEY: "timestamp", "value": "2024-03-05T14:30:00.123Z"}
    assert encoded["createdAt"] == tag
    assert encoded["items"][0]["addedAt"] == tag
    assert encoded["meta"]["nested"]["when"] == tag
    assert encoded["total"] == 10.5


def test_decode_restores_aware_utc_datetimes():
    decoded = deserialize_value({"openingDate": {DATATYPE_KEY: "timestamp", "value": "2024-03-05T11:30:00-03:00"}})

    assert decoded["openingDate"] == datetime(2024, 3, 5, 14, 30, tzinfo=timezone.utc)


def test_drop_fields_removes_keys_in_nested_objects():
    body = {"userId": "u1", "name": "Maria", "history": [{"userId": "u2", "note": "ok"}]}

    decoded = deserialize_value(body, drop_fields=("userId",))

    assert decoded == {"name": "Maria", "history": [{"note": "ok"}]}


def test_plain_values_pass_through():
    body = {"name": "Cliente", "tags": ["a", "b"], "count": 3, "active": True, "missing": None}

    assert serialize_value(body) == body
    assert deserialize_value(body) == body


def test_objects_that_only_look_similar_are_not_timestamps():
    assert not is_timestamp_tag({DATATYPE_KEY: "geopoint", "value": "1,2"})
    assert not is_timestamp_tag({"value": "2024-01-01T00:00:00Z"})
    assert deserialize_value({"value": "2024-01-01T00:00:00Z"}) == {"value": "2024-01-01T00:00:00Z"}


def test_round_trip_restores_nested_aware_datetimes():
    body = {
        "openingDate": datetime(2024, 5, 1, 13, 45, 10, 123000, tzinfo=timezone.utc),
        "additionalSoldProducts": [
            {"name": "Cabo", "quantity": 2, "unitPrice": 19.9, "soldAt": datetime(2024, 5, 2, tzinfo=timezone.utc)},
        ],
        "history": [[datetime(2023, 12, 31, 23, 59, 59, 999000, tzinfo=timezone.utc), "Aberta"]],
        "notes": None,
        "paid": False,
    }

    assert deserialize_value(serialize_value(body)) == body


def test_naive_datetimes_come_back_as_utc():
    naive = datetime(2024, 1, 1, 12, 0, 0, 123000)

    decoded = deserialize_value(serialize_value({"t": naive}))

    assert decoded["t"] == naive.replace(tzinfo=timezone.utc)
