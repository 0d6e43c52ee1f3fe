import pytest

from apriori_miner import AprioriMiner
from apriori_miner.errors import CapacityExceeded
from apriori_miner.itemsets import Itemset


@pytest.fixture
def miner():
    return AprioriMiner(min_support=2, num_procs=3)


class TestRun:

    def test_level_one(self, miner, scenario_corpus):
        result = miner.run(scenario_corpus)
        assert [(i.items, i.support) for i in result.level(1)] == [(('a',), 3), (('b',), 3), (('c',), 2)]

    def test_level_two(self, miner, scenario_corpus):
        result = miner.run(scenario_corpus)
        assert result.candidate_counts[:2] == [3, 3]
        assert [(i.items, i.support) for i in result.level(2)] == [(('a', 'b'), 2), (('b', 'c'), 2)]
        assert len(result.levels) == 2

    def test_merged_collection_and_rules(self, miner, scenario_corpus):
        result = miner.run(scenario_corpus)
        assert len(result.frequent) == 5
        rule = result.rules[0]
        assert (rule.antecedent.items, rule.full.items) == (('a',), ('a', 'b'))
        assert rule.support == pytest.approx(0.5)
        assert rule.confidence == pytest.approx(2 / 3)

    def test_every_frequent_itemset_meets_min_support(self, random_corpus):
        result = AprioriMiner(min_support=30, num_procs=4).run(random_corpus)
        for itemset in result.frequent:
            assert itemset.support >= 30
            assert itemset.length <= 4
            count = sum(1 for t in random_corpus if set(itemset.items) <= set(t))
            assert itemset.support == count

    def test_max_level_caps_search(self, random_corpus):
        result = AprioriMiner(min_support=5, max_level=2).run(random_corpus)
        assert max(i.length for i in result.frequent) <= 2
        assert len(result.levels) <= 2

    def test_plain_item_lists_accepted(self, miner):
        result = miner.run([['a', 'b'], ['b', 'a', 'a'], ['c']], rules=False)
        assert [(i.items, i.support) for i in result.frequent] == [(('a',), 2), (('b',), 2), (('a', 'b'), 2)]
        assert result.rules == []

    def test_stage_times_recorded(self, miner, scenario_corpus):
        result = miner.run(scenario_corpus)
        for stage in ['read', 'makec1', 'makel1', 'makec2', 'makel2', 'merge', 'genass']:
            assert stage in result.stage_times

    def test_nothing_frequent(self, scenario_corpus):
        result = AprioriMiner(min_support=10).run(scenario_corpus)
        assert len(result.frequent) == 0
        assert result.rules == []

    def test_empty_corpus(self, miner):
        with pytest.raises(ValueError):
            miner.run([])

    def test_capacity_error_names_stage(self, scenario_corpus):
        miner = AprioriMiner(min_support=1, collection_capacity=2)
        with pytest.raises(CapacityExceeded) as excinfo:
            miner.run(scenario_corpus)
        assert excinfo.value.stage == 'makec1'
        assert '[makec1]' in str(excinfo.value)

    def test_alphabet_overflow_names_stage(self):
        miner = AprioriMiner(min_support=1, alphabet_size=2)
        with pytest.raises(CapacityExceeded) as excinfo:
            miner.run([Itemset('abc')])
        assert excinfo.value.stage == 'makec1'

    def test_oversized_transaction_fails_on_read(self):
        miner = AprioriMiner(min_support=1, max_length=3, max_level=3)
        with pytest.raises(CapacityExceeded) as excinfo:
            miner.run([list('abcd')])
        assert excinfo.value.stage == 'read'


class TestParameters:

    @pytest.mark.parametrize('kwargs', [
        {'min_support': 0},
        {'min_confidence': 1.5},
        {'alphabet_size': 32},
        {'alphabet_size': 0},
        {'max_level': 11},
        {'max_level': 0},
        {'collection_capacity': 0},
        {'rule_capacity': 0},
        {'worker_buffer_capacity': 0},
        {'num_procs': 0},
        {'on_undefined_confidence': 'skip'},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            AprioriMiner(**kwargs)

    def test_worker_buffer_defaults_to_alphabet(self):
        assert AprioriMiner(alphabet_size=12).worker_buffer_capacity == 12


class TestMineInterface:

    def test_mine_itemsets(self, miner, scenario_corpus):
        itemsets, stats = miner.mine_itemsets(scenario_corpus)
        assert stats['num_itemsets'] == 5
        assert stats['num_levels'] == 2
        assert {'items': ['a', 'b'], 'count': 2, 'support': 0.5} in itemsets

    def test_mine_rules_ranked_and_filtered(self, scenario_corpus):
        miner = AprioriMiner(min_support=2, min_confidence=0.7)
        rules, stats = miner.mine_rules(scenario_corpus)
        assert len(rules) == 1
        assert rules[0]['antecedent'] == ['c']
        assert rules[0]['consequent'] == ['b']
        assert rules[0]['confidence'] == pytest.approx(1.0)
        assert rules[0]['lift'] == pytest.approx(4 / 3)
        assert stats['num_rules'] == 1

    def test_mine_rules_order(self, miner, scenario_corpus):
        rules, _ = miner.mine_rules(scenario_corpus)
        confidences = [r['confidence'] for r in rules]
        assert confidences == sorted(confidences, reverse=True)
