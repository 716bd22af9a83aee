"""
Pattern export: JSON grid persistence, color summary CSV and preview PNG.
"""

import csv
import json
import os
from typing import Dict, List, Optional

from .catalog import ColorCatalog, ColorSystem, get_color_catalog
from .grid import PatternGrid
from .image_io import render_preview


def _ensure_parent(path: str):
    dir_path = os.path.dirname(path)
    if dir_path:
        os.makedirs(dir_path, exist_ok=True)


def save_pattern(grid: PatternGrid, path: str):
    """Write a grid as JSON: rows, cols and the cell matrix."""
    _ensure_parent(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(grid.to_dict(), f, ensure_ascii=False)


def load_pattern(path: str) -> PatternGrid:
    """Read a grid written by save_pattern."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Pattern file not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    try:
        return PatternGrid.from_dict(data)
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed pattern file {path}: {e}") from e


def color_summary(grid: PatternGrid, system=ColorSystem.MARD,
                  catalog: Optional[ColorCatalog] = None) -> List[Dict]:
    """
    Bead counts per identifier with display codes, most used first.

    External and empty cells are not counted.
    """
    catalog = catalog or get_color_catalog()
    system = ColorSystem.parse(system)
    summary = []
    for key, info in grid.color_counts().items():
        summary.append({
            'key': key,
            'code': catalog.display_key(key, system),
            'color': info['color'],
            'count': info['count'],
        })
    summary.sort(key=lambda item: item['count'], reverse=True)
    return summary


def write_color_summary_csv(grid: PatternGrid, path: str, system=ColorSystem.MARD,
                            catalog: Optional[ColorCatalog] = None) -> int:
    """Write the color summary as CSV; returns the number of rows written."""
    system = ColorSystem.parse(system)
    summary = color_summary(grid, system, catalog)
    total = sum(item['count'] for item in summary)

    _ensure_parent(path)
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(['code', 'hex', 'count', 'percent', 'system'])
        for item in summary:
            percent = item['count'] / total * 100 if total else 0.0
            writer.writerow([
                item['code'],
                item['color'],
                item['count'],
                f"{percent:.1f}",
                system.value,
            ])
    return len(summary)


def export_pattern(grid: PatternGrid, output_dir: str, name: str = "pattern",
                   system=ColorSystem.MARD, catalog: Optional[ColorCatalog] = None,
                   preview_cell_size: int = 10) -> Dict[str, str]:
    """
    Write pattern JSON, color summary CSV and a PNG preview.

    Returns:
        Mapping of file kind -> written path
    """
    print("Exporting bead pattern...")
    os.makedirs(output_dir, exist_ok=True)

    paths = {
        'pattern': os.path.join(output_dir, f"{name}.json"),
        'summary': os.path.join(output_dir, f"{name}_colors.csv"),
        'preview': os.path.join(output_dir, f"{name}_preview.png"),
    }

    save_pattern(grid, paths['pattern'])
    print(f"  Pattern: {paths['pattern']}")

    rows = write_color_summary_csv(grid, paths['summary'], system, catalog)
    print(f"  Color summary: {paths['summary']} ({rows} colors)")

    render_preview(grid, preview_cell_size).save(paths['preview'])
    print(f"  Preview: {paths['preview']}")

    print(f"[OK] Pattern exported successfully to {output_dir}")
    return paths
