from apriori_miner.itemsets import Itemset, ItemsetCollection
from apriori_miner.rule_mining.support import count_level, count_support


def test_count_support(scenario_corpus):
    assert count_support(Itemset('a'), scenario_corpus) == 3
    assert count_support(Itemset('ab'), scenario_corpus) == 2
    assert count_support(Itemset('ac'), scenario_corpus) == 1
    assert count_support(Itemset('abc'), scenario_corpus) == 1
    assert count_support(Itemset('d'), scenario_corpus) == 0


def test_count_level_applies_threshold(scenario_corpus, scheduler):
    candidates = ItemsetCollection([Itemset('ab'), Itemset('ac'), Itemset('bc')])
    frequent = count_level(candidates, scenario_corpus, 2, scheduler)
    assert [(i.items, i.support) for i in frequent] == [(('a', 'b'), 2), (('b', 'c'), 2)]


def test_count_level_records_count_on_every_candidate(scenario_corpus, scheduler):
    candidates = ItemsetCollection([Itemset('a'), Itemset('b'), Itemset('c')])
    count_level(candidates, scenario_corpus, 10, scheduler)
    assert [i.support for i in candidates] == [3, 3, 2]


def test_threshold_is_inclusive(scenario_corpus, serial_scheduler):
    candidates = ItemsetCollection([Itemset('c')])
    assert len(count_level(candidates, scenario_corpus, 2, serial_scheduler)) == 1
    assert len(count_level(candidates, scenario_corpus, 3, serial_scheduler)) == 0
