import pytest

from apriori_miner.errors import CapacityExceeded
from apriori_miner.itemsets import (
    Itemset,
    compare,
    insert_sorted,
    is_equal,
    is_subset,
    match_count,
    merge,
)


class TestItemset:

    def test_items_are_sorted_on_construction(self):
        itemset = Itemset(['c', 'a', 'b'])
        assert itemset.items == ('a', 'b', 'c')
        assert itemset.length == 3

    def test_duplicate_item_rejected(self):
        with pytest.raises(ValueError):
            Itemset(['a', 'b', 'a'])

    def test_eleventh_item_exceeds_capacity(self):
        itemset = Itemset('abcdefghij')
        assert itemset.length == 10
        with pytest.raises(CapacityExceeded) as excinfo:
            itemset.add('k')
        assert excinfo.value.capacity == 10
        assert itemset.length == 10

    def test_from_sorted_validates_order(self):
        assert Itemset.from_sorted(['a', 'c']).items == ('a', 'c')
        with pytest.raises(ValueError):
            Itemset.from_sorted(['c', 'a'])
        with pytest.raises(ValueError):
            Itemset.from_sorted(['a', 'a'])
        with pytest.raises(CapacityExceeded):
            Itemset.from_sorted('abc', max_length=2)

    def test_equality_ignores_support(self):
        assert Itemset(['a', 'b'], support=1) == Itemset(['b', 'a'], support=9)
        assert hash(Itemset(['a', 'b'], support=1)) == hash(Itemset(['a', 'b']))

    def test_without_and_difference(self):
        itemset = Itemset(['a', 'b', 'c'])
        assert itemset.without(0).items == ('b', 'c')
        assert itemset.without(2).items == ('a', 'b')
        assert itemset.difference(Itemset(['b'])).items == ('a', 'c')

    def test_str(self):
        assert str(Itemset(['b', 'a'])) == '{a, b}'


class TestComparisons:

    def test_match_count(self):
        assert match_count(Itemset('abc'), Itemset('bcd')) == 2
        assert match_count(Itemset('ab'), Itemset('cd')) == 0
        assert match_count(Itemset(), Itemset('a')) == 0

    def test_match_count_is_symmetric(self):
        a, b = Itemset('acef'), Itemset('bcdf')
        assert match_count(a, b) == match_count(b, a) == 2

    def test_is_subset(self):
        assert is_subset(Itemset('abc'), Itemset('ac'))
        assert is_subset(Itemset('abc'), Itemset())
        assert not is_subset(Itemset('abc'), Itemset('ad'))
        assert not is_subset(Itemset('ab'), Itemset('abc'))
        assert Itemset('a').issubset(Itemset('ab'))
        assert Itemset('ab').issuperset(Itemset('b'))

    def test_is_equal(self):
        assert is_equal(Itemset('ab'), Itemset('ba'))
        assert not is_equal(Itemset('ab'), Itemset('abc'))
        assert not is_equal(Itemset('ab'), Itemset('ac'))

    def test_compare_orders_by_length_first(self):
        assert compare(Itemset('z'), Itemset('ab')) < 0
        assert compare(Itemset('ab'), Itemset('ac')) < 0
        assert compare(Itemset('ab'), Itemset('ab')) == 0
        assert sorted([Itemset('bc'), Itemset('c'), Itemset('ab')]) == [Itemset('c'), Itemset('ab'), Itemset('bc')]


class TestMerge:

    def test_merge_adds_missing_item(self):
        result = merge(Itemset('ab'), Itemset('ac'))
        assert result.items == ('a', 'b', 'c')
        assert result.length == 3

    def test_merge_of_singletons(self):
        assert merge(Itemset('b'), Itemset('a')).items == ('a', 'b')

    def test_merge_does_not_modify_inputs(self):
        a, b = Itemset('ab'), Itemset('bc')
        merge(a, b)
        assert a.items == ('a', 'b')
        assert b.items == ('b', 'c')

    def test_merge_rejects_unjoinable(self):
        with pytest.raises(ValueError):
            merge(Itemset('ab'), Itemset('cd'))
        with pytest.raises(ValueError):
            merge(Itemset('ab'), Itemset('abc'))

    def test_merge_beyond_buffer(self):
        with pytest.raises(CapacityExceeded):
            merge(Itemset('ab', max_length=2), Itemset('ac', max_length=2))

    def test_insert_sorted_shifts_larger_items(self):
        itemset = Itemset('bd')
        insert_sorted(itemset, 'c')
        insert_sorted(itemset, 'a')
        insert_sorted(itemset, 'e')
        assert itemset.items == ('a', 'b', 'c', 'd', 'e')
