from __future__ import annotations

import threading

import pytest

from daypass import db
from daypass.errors import StoreError
from daypass.services.batches import create_batch, get_batch, list_active_batches, set_batch_active


def test_failed_transaction_rolls_back_every_statement(conn):
    a = create_batch(conn, name="A")
    b = create_batch(conn, name="B")
    set_batch_active(conn, a.id, True)

    with pytest.raises(StoreError):
        db.tx(
            conn,
            [
                ("UPDATE batches SET active=0 WHERE active=1 AND id<>?", (b.id,)),
                ("UPDATE no_such_table SET active=1 WHERE id=?", (b.id,)),
            ],
        )

    assert [x.id for x in list_active_batches(conn)] == [a.id]
    assert get_batch(conn, b.id).active is False


def test_writes_wait_for_a_running_transaction(conn):
    batch = create_batch(conn, name="A")
    done = threading.Event()

    def rename():
        db.x(conn, "UPDATE batches SET name=? WHERE id=?", ("B", batch.id))
        done.set()

    with db._write_lock:
        worker = threading.Thread(target=rename)
        worker.start()
        assert not done.wait(0.2)
    worker.join(5)

    assert done.is_set()
    assert get_batch(conn, batch.id).name == "B"
