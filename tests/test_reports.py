import pandas as pd

from apriori_miner.utils.excel_io import format_rule_for_excel, save_rule_mining_results, save_rules_text

RULES = [
    {'antecedent': ['a', 'c'], 'consequent': ['b'], 'support': 0.5, 'confidence': 1.0, 'lift': 1.33, 'count': 2},
]


def test_format_rule_for_excel():
    row = format_rule_for_excel(RULES[0])
    assert row['antecedent'] == 'a AND c'
    assert row['consequent'] == 'b'
    assert RULES[0]['antecedent'] == ['a', 'c']


def test_excel_report(tmp_path):
    stats = {'num_rules': 1, 'stage_times': {'makel1': 0.01}}
    itemsets = [{'items': ['a'], 'count': 3, 'support': 0.75}]
    path = save_rule_mining_results(RULES, stats, tmp_path / 'report', itemsets=itemsets,
                                    parameters={'min_support': 2})
    assert path.suffix == '.xlsx'
    sheets = pd.read_excel(path, sheet_name=None)
    assert set(sheets) == {'Rules', 'Itemsets', 'Summary', 'Parameters'}
    assert sheets['Rules'].loc[0, 'antecedent'] == 'a AND c'
    assert 'time_makel1' in sheets['Summary']['Metric'].tolist()


def test_text_report(tmp_path):
    path = save_rules_text(RULES, tmp_path / 'rules', metadata={'dataset': 'baskets'})
    text = path.read_text()
    assert path.suffix == '.txt'
    assert 'IF a AND c' in text
    assert 'THEN b' in text
    assert 'Total rules: 1' in text


def test_text_report_without_rules(tmp_path):
    assert 'No rules found.' in save_rules_text([], tmp_path / 'empty.txt').read_text()
