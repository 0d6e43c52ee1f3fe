"""
Excel and plain-text reports of a mining run.

Rule rows are the dicts produced by ``MiningResult.rule_rows``; itemset rows
carry 'items', 'count' and 'support'. Item lists are rendered as "a AND b".
"""
import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

logger = logging.getLogger(__name__)

ITEM_SEPARATOR = ' AND '

RULE_METRICS = [
    ('confidence', 'Confidence'),
    ('support', 'Support'),
    ('lift', 'Lift'),
    ('count', 'Count'),
    ('antecedent_count', 'Antecedent count'),
]


def _with_suffix(path: Union[str, Path], suffix: str) -> Path:
    path = Path(path)
    if path.suffix != suffix:
        path = path.with_suffix(suffix)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _summary_frame(stats: Dict[str, Any], metadata: Dict[str, Any] = None) -> pd.DataFrame:
    rows = [(key, value) for key, value in stats.items() if not isinstance(value, dict)]
    rows += [(f'time_{stage}', seconds) for stage, seconds in stats.get('stage_times', {}).items()]
    rows += list((metadata or {}).items())
    return pd.DataFrame(rows, columns=['Metric', 'Value'])


def save_rule_mining_results(
    rules: List[Dict[str, Any]],
    stats: Dict[str, Any],
    output_path: Union[str, Path],
    itemsets: List[Dict[str, Any]] = None,
    parameters: Dict[str, Any] = None,
    metadata: Dict[str, Any] = None
) -> Path:
    """
    Write a mining run to an Excel workbook.

    Sheets: Rules (if any), Itemsets (if given), Summary (stats, per-stage
    times as ``time_<stage>`` rows, metadata) and Parameters (if given).
    Non-finite confidences are written as the text 'inf'; NaN cells stay empty.

    Args:
        rules: Rule rows
        stats: Statistics from mining; a nested 'stage_times' dict is flattened
        output_path: Target path, '.xlsx' is enforced
        itemsets: Frequent itemset rows
        parameters: Mining parameters
        metadata: Extra Summary rows (dataset, etc.)
    """
    output_path = _with_suffix(output_path, '.xlsx')

    with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
        if rules:
            pd.DataFrame([format_rule_for_excel(rule) for rule in rules]).to_excel(
                writer, sheet_name='Rules', index=False, inf_rep='inf')
        if itemsets:
            frame = pd.DataFrame(itemsets)
            frame['items'] = frame['items'].map(_format_itemset)
            frame.to_excel(writer, sheet_name='Itemsets', index=False)
        _summary_frame(stats, metadata).to_excel(writer, sheet_name='Summary', index=False)
        if parameters:
            pd.DataFrame(
                [(name, str(value)) for name, value in parameters.items()],
                columns=['Parameter', 'Value']
            ).to_excel(writer, sheet_name='Parameters', index=False)

    logger.info("Results saved to: %s", output_path)
    return output_path


def format_rule_for_excel(rule: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``rule`` with both sides joined by " AND ", splittable back."""
    return {
        key: _format_itemset(value) if key in ('antecedent', 'consequent') else value
        for key, value in rule.items()
    }


def _format_itemset(val: Any) -> str:
    if isinstance(val, str):
        return val
    if isinstance(val, (list, tuple, set, frozenset)):
        return ITEM_SEPARATOR.join(str(item) for item in val)
    return str(val)


def _format_metric(value, decimals: int = 4) -> str:
    if value is None:
        return "N/A"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return f"{value:.{decimals}f}" if math.isfinite(value) else "undefined"
    return str(value)


def save_rules_text(
    rules: List[Dict[str, Any]],
    output_path: Union[str, Path],
    title: str = "ASSOCIATION RULES",
    metadata: Dict[str, Any] = None
) -> Path:
    """
    Save rules as a readable IF/THEN listing with a metadata header.

    Args:
        rules: Rule rows, in the order they should be listed
        output_path: Target path, '.txt' is enforced
        title: Header line
        metadata: Key/value lines for the header
    """
    output_path = _with_suffix(output_path, '.txt')
    rule_line = "=" * 80

    lines = [rule_line, title, f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"]
    lines += [f"{key}: {val}" for key, val in (metadata or {}).items()]
    lines += [rule_line, ""]
    if rules:
        for number, rule in enumerate(rules, 1):
            lines += _rule_lines(rule, number)
    else:
        lines.append("No rules found.")
    lines += [rule_line, f"Total rules: {len(rules)}", rule_line]

    output_path.write_text("\n".join(lines) + "\n")
    logger.info("Rules saved to: %s", output_path)
    return output_path


def _rule_lines(rule: Dict[str, Any], number: int) -> List[str]:
    lines = [
        f"Rule #{number}:",
        f"  IF {_format_itemset(rule.get('antecedent', 'N/A'))}",
        f"  THEN {_format_itemset(rule.get('consequent', 'N/A'))}",
    ]
    lines += [f"    {label:18s} {_format_metric(rule[key])}" for key, label in RULE_METRICS if key in rule]
    return lines + [""]
