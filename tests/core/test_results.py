import random
import time

import pytest

from valnode.core.results import NodeResults, run_parallel


def test_run_parallel_collects_every_key_with_random_delays():
    keys = [f"node-{i}" for i in range(25)]

    def work(key):
        time.sleep(random.uniform(0, 0.02))
        if key.endswith("3"):
            raise RuntimeError(f"{key} broke")
        return key.upper()

    results = run_parallel(keys, work)

    assert sorted(results.node_ids()) == sorted(keys)
    failed = results.error_hosts()
    assert sorted(failed) == ["node-13", "node-23", "node-3"]
    assert results.has_errors()
    assert results.get("node-0").value == "NODE-0"
    assert results.get("node-0").ok


def test_results_reject_second_write_for_same_node():
    results = NodeResults()
    results.add_result("a", value=1)
    with pytest.raises(ValueError):
        results.add_result("a", value=2)
    assert results.get("a").value == 1


def test_run_parallel_rejects_duplicate_keys():
    with pytest.raises(ValueError):
        run_parallel(["a", "a"], lambda k: k)


def test_run_parallel_with_no_keys_returns_empty():
    results = run_parallel([], lambda k: k)
    assert len(results) == 0
    assert not results.has_errors()
