"""
Reading-order helpers for OCR line output.
"""

from typing import Dict, List, Optional

from ..config import CONFIG


def cluster_text_rows(elements: List[Dict], y_threshold: Optional[int] = None) -> List[Dict]:
    """
    Clusters text elements into rows based on Y-coordinate alignment.
    Sorts rows by Y, and elements within rows by X.
    Expected 'elements' is a list of dicts, each having a 'bbox' [x1, y1, x2, y2].

    Each returned element is a copy tagged with its ``row_id``.
    """
    if not elements:
        return []
    if y_threshold is None:
        y_threshold = CONFIG.row_y_threshold

    sorted_elements = sorted(elements, key=lambda e: e['bbox'][1])

    rows: List[List[Dict]] = []
    current_row: List[Dict] = []

    for elem in sorted_elements:
        if current_row and abs(elem['bbox'][1] - current_row[0]['bbox'][1]) >= y_threshold:
            rows.append(sorted(current_row, key=lambda e: e['bbox'][0]))
            current_row = []
        current_row.append(elem)

    if current_row:
        rows.append(sorted(current_row, key=lambda e: e['bbox'][0]))

    ordered_elements = []
    for row_idx, row in enumerate(rows):
        for elem in row:
            ordered_elements.append(dict(elem, row_id=row_idx))

    return ordered_elements


def rows_to_text(elements: List[Dict]) -> str:
    """
    Join clustered elements into plain text.

    Elements sharing a ``row_id`` are joined with a space, rows with a
    newline, so each screen row becomes one text line.
    """
    lines: List[str] = []
    current_row = None
    parts: List[str] = []

    for elem in elements:
        content = (elem.get('content') or '').strip()
        if not content:
            continue
        row_id = elem.get('row_id')
        if parts and row_id != current_row:
            lines.append(' '.join(parts))
            parts = []
        current_row = row_id
        parts.append(content)

    if parts:
        lines.append(' '.join(parts))

    return '\n'.join(lines)
