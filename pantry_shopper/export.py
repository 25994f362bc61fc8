"""Shopping list export in various formats."""

import csv
import io
import json
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from .aggregator import ShoppingListItem, coerce_item, summarize_shopping_list

CSV_HEADER = ["ingredient", "totalAmount", "category", "recipes", "checked"]


def shopping_list_to_csv(items: Iterable[ShoppingListItem | dict[str, Any]]) -> str:
    """
    Render shopping items as CSV.

    Fields holding a comma, quote or newline are quoted with inner quotes
    doubled. Recipes are joined with ";" inside one field.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for raw in items:
        item = coerce_item(raw)
        writer.writerow(
            [
                item.ingredient,
                item.total_amount,
                item.category,
                ";".join(item.recipes),
                "true" if item.checked else "false",
            ]
        )

    return buffer.getvalue()


def export_to_csv(items: list[ShoppingListItem | dict[str, Any]], filepath: str | Path) -> None:
    """Export shopping list to CSV format."""
    with open(filepath, "w", encoding="utf-8", newline="") as f:
        f.write(shopping_list_to_csv(items))


def export_to_json(
    items: list[ShoppingListItem | dict[str, Any]],
    filepath: str | Path,
    *,
    list_name: str | None = None,
) -> None:
    """
    Export shopping list to JSON format.

    Args:
        items: Shopping list items
        filepath: Output file path
        list_name: Optional list name
    """
    coerced = [coerce_item(i) for i in items]
    summary = summarize_shopping_list(coerced)

    data: dict[str, Any] = {
        "exported_at": datetime.now().isoformat(),
        "list_name": list_name,
        "items": [item.to_dict() for item in coerced],
        "summary": {
            "total_items": summary.total_items,
            "checked": summary.checked_items,
            "remaining": summary.remaining_items,
            "recipe_count": summary.recipe_count,
            "categories": summary.categories,
        },
    }

    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def export_to_markdown(
    items: list[ShoppingListItem | dict[str, Any]],
    filepath: str | Path,
    *,
    list_name: str | None = None,
) -> None:
    """
    Export shopping list to Markdown format, grouped by category.

    Args:
        items: Shopping list items
        filepath: Output file path
        list_name: Optional list name
    """
    coerced = [coerce_item(i) for i in items]
    summary = summarize_shopping_list(coerced)
    lines: list[str] = []

    # Header
    lines.append(f"# {list_name or 'Shopping List'}")
    lines.append("")
    lines.append(f"*Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}*")
    lines.append("")

    # Summary
    lines.append("## Summary")
    lines.append("")
    lines.append(f"- **Items:** {summary.total_items}")
    lines.append(f"- **Checked:** {summary.checked_items}")
    lines.append(f"- **Remaining:** {summary.remaining_items}")
    lines.append(f"- **Recipes:** {summary.recipe_count}")
    lines.append("")

    groups: dict[str, list[ShoppingListItem]] = {}
    for item in coerced:
        groups.setdefault(item.category or "other", []).append(item)

    for category in sorted(groups):
        lines.append(f"## {category.capitalize()}")
        lines.append("")
        for item in groups[category]:
            box = "[x]" if item.checked else "[ ]"
            amount = f" - {item.total_amount}" if item.total_amount else ""
            line = f"- {box} **{item.ingredient}**{amount}"
            if item.recipes:
                line += f" *({', '.join(item.recipes)})*"
            lines.append(line)
        lines.append("")

    with open(filepath, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))


def export_shopping_list(
    items: list[ShoppingListItem | dict[str, Any]],
    filepath: str | Path,
    *,
    list_name: str | None = None,
    format: str | None = None,
) -> str:
    """
    Export shopping list to file.

    Format is auto-detected from file extension if not specified.

    Args:
        items: Shopping list items
        filepath: Output file path
        list_name: Optional list name used as title
        format: Output format (csv, json, md) - auto-detected if None

    Returns:
        The format used for export
    """
    path = Path(filepath)

    # Auto-detect format from extension
    if format is None:
        ext = path.suffix.lower()
        format_map = {
            ".csv": "csv",
            ".json": "json",
            ".md": "md",
            ".markdown": "md",
        }
        format = format_map.get(ext, "md")

    if format == "csv":
        export_to_csv(items, filepath)
    elif format == "json":
        export_to_json(items, filepath, list_name=list_name)
    elif format in ("md", "markdown"):
        export_to_markdown(items, filepath, list_name=list_name)
    else:
        raise ValueError(f"Unsupported format: {format}")

    return format
