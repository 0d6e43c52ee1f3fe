import math


def filter_rules(rules, criterion: str, threshold: float):
    """
    Filters rules based on a criterion >= threshold.

    Args:
        rules: List of rule dictionaries
        criterion: The rule metric to filter on (e.g., 'support', 'confidence', 'lift')
        threshold: Minimum value for the criterion (inclusive)

    Returns:
        List of rules meeting the criterion. Rules where the metric is missing,
        None or NaN are dropped.
    """
    def value(rule):
        v = rule.get(criterion)
        if v is None or (isinstance(v, float) and math.isnan(v)):
            return float("-inf")
        return v

    return [rule for rule in rules if value(rule) >= threshold]


def rank_rules(rules, keys=('confidence', 'support')):
    """
    Sort rules descending by the given metrics, in priority order.

    Missing, None and NaN values rank last.
    """
    def sort_key(rule):
        ranked = []
        for key in keys:
            v = rule.get(key)
            if v is None or (isinstance(v, float) and math.isnan(v)):
                v = float("-inf")
            ranked.append(v)
        return tuple(ranked)

    return sorted(rules, key=sort_key, reverse=True)


def filter_rules_by_pattern(
    rules,
    antecedent_contains: list = None,
    consequent_contains: list = None,
    antecedent_excludes: list = None,
    consequent_excludes: list = None,
    match_any: bool = False
):
    """
    Filter rules by the items on either side.

    Args:
        rules: List of rule dictionaries with 'antecedent' and 'consequent' item lists
        antecedent_contains: Items that must appear in antecedent
        consequent_contains: Items that must appear in consequent
        antecedent_excludes: Items that must NOT appear in antecedent
        consequent_excludes: Items that must NOT appear in consequent
        match_any: If True, match if ANY item matches. If False, ALL must match.

    Returns:
        List of filtered rules
    """
    def normalize(val):
        if val is None:
            return set()
        if isinstance(val, str):
            return {val}
        return {str(item) for item in val}

    def matches(side, items):
        if not items:
            return True
        present = normalize(side)
        if match_any:
            return any(str(i) in present for i in items)
        return all(str(i) in present for i in items)

    def excludes(side, items):
        if not items:
            return True
        present = normalize(side)
        return not any(str(i) in present for i in items)

    filtered = []
    for rule in rules:
        ant = rule.get('antecedent')
        cons = rule.get('consequent')

        if (matches(ant, antecedent_contains) and matches(cons, consequent_contains)
                and excludes(ant, antecedent_excludes) and excludes(cons, consequent_excludes)):
            filtered.append(rule)

    return filtered


def filter_itemsets(itemsets, criterion: str = 'support', threshold: float = 0.0):
    """
    Filters frequent itemsets based on a criterion >= threshold.
    Returns both filtered itemsets and a stats dictionary.

    Args:
        itemsets: List of itemset dictionaries (each with 'items', 'count' and 'support' keys)
        criterion: The metric to filter on (default: 'support')
        threshold: Minimum value for the criterion (inclusive)

    Returns:
        Tuple of (filtered_itemsets, stats)
    """
    filtered_itemset_list = [itemset for itemset in itemsets if itemset.get(criterion, float("-inf")) >= threshold]

    count = len(filtered_itemset_list)
    if count == 0:
        stats = {
            "num_itemsets": 0,
            "average_support": 0.0,
        }
        return filtered_itemset_list, stats

    avg_support = sum(item.get("support", 0) for item in filtered_itemset_list) / count

    stats = {
        "num_itemsets": count,
        "average_support": round(avg_support, 3),
    }

    return filtered_itemset_list, stats
