"""Unit tests for per-producer locking"""

import threading
import time
from produce_ledger.utils.locks import KeyedLock


def test_same_key_serializes_read_modify_write():
    locks = KeyedLock()
    balance = {"value": 0}

    def credit():
        with locks.hold("farmer_001"):
            current = balance["value"]
            time.sleep(0.001)  # Widen the race window
            balance["value"] = current + 2

    threads = [threading.Thread(target=credit) for _ in range(25)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert balance["value"] == 50


def test_different_keys_do_not_block_each_other():
    locks = KeyedLock()

    with locks.hold("farmer_001"):
        acquired = threading.Event()

        def other_producer():
            with locks.hold("farmer_002"):
                acquired.set()

        worker = threading.Thread(target=other_producer)
        worker.start()
        worker.join(timeout=2)

        assert acquired.is_set()
