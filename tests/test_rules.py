import math

import pytest

from apriori_miner.errors import CapacityExceeded, UndefinedConfidence
from apriori_miner.itemsets import Itemset, ItemsetCollection
from apriori_miner.rule_mining.rules import extract_rules, rule_confidence


@pytest.fixture
def cumulative():
    """Frequent itemsets of the four-transaction corpus at min support 2."""
    return ItemsetCollection([
        Itemset('a', support=3),
        Itemset('b', support=3),
        Itemset('c', support=2),
        Itemset('ab', support=2),
        Itemset('bc', support=2),
    ])


def test_rule_support_and_confidence(cumulative, scheduler):
    rules = extract_rules(cumulative, 4, scheduler)
    first = rules[0]
    assert first.antecedent.items == ('a',)
    assert first.full.items == ('a', 'b')
    assert first.consequent.items == ('b',)
    assert first.support == pytest.approx(0.5)
    assert first.confidence == pytest.approx(2 / 3)


def test_rules_in_enumeration_order(cumulative, scheduler):
    rules = extract_rules(cumulative, 4, scheduler)
    assert [(r.antecedent.items, r.full.items) for r in rules] == [
        (('a',), ('a', 'b')),
        (('b',), ('a', 'b')),
        (('b',), ('b', 'c')),
        (('c',), ('b', 'c')),
    ]
    assert rules[3].confidence == pytest.approx(1.0)


def test_every_rule_antecedent_is_proper_subset(cumulative, scheduler):
    for rule in extract_rules(cumulative, 4, scheduler):
        assert rule.antecedent.length < rule.full.length
        assert rule.antecedent.issubset(rule.full)


def test_singletons_only_give_no_rules(scheduler):
    assert extract_rules(ItemsetCollection([Itemset('a', support=1)]), 1, scheduler) == []


def test_empty_itemset_never_an_antecedent(scheduler):
    frequent = ItemsetCollection([Itemset(support=4), Itemset('a', support=3), Itemset('ab', support=2)])
    rules = extract_rules(frequent, 4, scheduler)
    assert [(r.antecedent.items, r.consequent.items) for r in rules] == [(('a',), ('b',))]


def test_rule_capacity(cumulative, scheduler):
    with pytest.raises(CapacityExceeded) as excinfo:
        extract_rules(cumulative, 4, scheduler, capacity=3)
    assert excinfo.value.what == 'rule list'


def test_invalid_arguments(cumulative, scheduler):
    with pytest.raises(ValueError):
        extract_rules(cumulative, 0, scheduler)
    with pytest.raises(ValueError):
        extract_rules(cumulative, 4, scheduler, on_undefined_confidence='ignore')


class TestUndefinedConfidence:

    def test_propagate_gives_inf(self):
        assert rule_confidence(Itemset('a', support=0), Itemset('ab', support=2)) == math.inf

    def test_propagate_gives_nan_when_both_zero(self):
        assert math.isnan(rule_confidence(Itemset('a', support=0), Itemset('ab', support=0)))

    def test_raise_policy(self):
        with pytest.raises(UndefinedConfidence):
            rule_confidence(Itemset('a', support=0), Itemset('ab', support=2), policy='raise')

    def test_propagated_rule_is_flagged(self, scheduler):
        frequent = ItemsetCollection([Itemset('a', support=0), Itemset('ab', support=1)])
        rules = extract_rules(frequent, 2, scheduler)
        assert not rules[0].confidence_defined

    def test_raise_policy_aborts_extraction(self, scheduler):
        frequent = ItemsetCollection([Itemset('a', support=0), Itemset('ab', support=1)])
        with pytest.raises(UndefinedConfidence):
            extract_rules(frequent, 2, scheduler, on_undefined_confidence='raise')


def test_to_dict(cumulative, scheduler):
    row = extract_rules(cumulative, 4, scheduler)[0].to_dict()
    assert row['antecedent'] == ['a']
    assert row['consequent'] == ['b']
    assert row['count'] == 2
    assert row['antecedent_count'] == 3
