"""Firestore gateway tests against a mocked client."""

from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1 import DELETE_FIELD

from medreminder.errors import StoreError
from medreminder.services.firestore_store import BATCH_LIMIT, FirestoreStore


def _snap(doc_id, data):
    snap = MagicMock()
    snap.id = doc_id
    snap.to_dict.return_value = data
    return snap


def test_find_applies_equality_filters():
    client = MagicMock()
    query = client.collection.return_value
    query.where.return_value = query
    query.stream.return_value = [_snap("d1", {"userId": "u1"})]

    rows = FirestoreStore(client).find("medicationDoses", {"userId": "u1", "date": "2024-06-15"})

    assert rows == [("d1", {"userId": "u1"})]
    client.collection.assert_called_once_with("medicationDoses")
    filters = [call.kwargs["filter"] for call in query.where.call_args_list]
    assert [(f.field_path, f.op_string, f.value) for f in filters] == [
        ("userId", "==", "u1"),
        ("date", "==", "2024-06-15"),
    ]


def test_update_turns_none_into_field_deletion():
    client = MagicMock()
    FirestoreStore(client).update("medications", "m1", {"endDate": None, "updatedAt": 5})
    document = client.collection.return_value.document
    document.assert_called_once_with("m1")
    document.return_value.update.assert_called_once_with({"endDate": DELETE_FIELD, "updatedAt": 5})


def test_delete_many_commits_in_batches():
    client = MagicMock()
    removed = FirestoreStore(client).delete_many("medicationDoses", [f"d{i}" for i in range(BATCH_LIMIT + 1)])
    assert removed == BATCH_LIMIT + 1
    assert client.batch.call_count == 2
    assert client.batch.return_value.commit.call_count == 2


def test_api_errors_become_store_errors():
    client = MagicMock()
    client.collection.return_value.add.side_effect = google_exceptions.PermissionDenied("denied")
    with pytest.raises(StoreError):
        FirestoreStore(client).add("medications", {"name": "x"})


def test_subscribe_forwards_full_result_sets():
    client = MagicMock()
    query = client.collection.return_value
    query.where.return_value = query
    received = []

    unsubscribe = FirestoreStore(client).subscribe("medications", {"userId": "u1"}, received.append)

    on_snapshot = query.on_snapshot.call_args.args[0]
    on_snapshot([_snap("m1", {"name": "A"}), _snap("m2", {"name": "B"})], [], None)
    assert received == [[("m1", {"name": "A"}), ("m2", {"name": "B"})]]
    assert unsubscribe is query.on_snapshot.return_value.unsubscribe
