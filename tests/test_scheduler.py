import pytest

from apriori_miner.rule_mining.scheduler import BatchScheduler


def test_batch_size_leaves_one_processor():
    assert BatchScheduler(num_procs=4).batch_size == 3
    assert BatchScheduler(num_procs=2).batch_size == 1
    assert BatchScheduler(num_procs=1).batch_size == 1


def test_invalid_num_procs():
    with pytest.raises(ValueError):
        BatchScheduler(num_procs=0)


def test_batches_cut_lazily():
    scheduler = BatchScheduler(num_procs=4)
    assert list(scheduler.batches(iter(range(7)))) == [[0, 1, 2], [3, 4, 5], [6]]
    assert list(scheduler.batches([])) == []


def test_map_batches_preserves_order():
    scheduler = BatchScheduler(num_procs=3)
    output = list(scheduler.map_batches(lambda x: x * x, range(5)))
    assert [batch for batch, _ in output] == [[0, 1], [2, 3], [4]]
    assert [r for _, results in output for r in results] == [0, 1, 4, 9, 16]


def test_batch_joined_before_next_dispatch():
    scheduler = BatchScheduler(num_procs=3)
    finished = []

    def work(unit):
        finished.append(unit)
        return unit

    for batch, _ in scheduler.map_batches(work, range(6)):
        assert sorted(finished) == list(range(batch[-1] + 1))


def test_worker_error_propagates():
    scheduler = BatchScheduler(num_procs=3)

    def work(unit):
        if unit == 3:
            raise RuntimeError("boom")
        return unit

    with pytest.raises(RuntimeError, match="boom"):
        list(scheduler.map_batches(work, range(6)))
