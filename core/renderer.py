# =============================================================================
# core/renderer.py  —  Adaptive result formatting
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns a row set into text sized for a chat window.  The strategy is
#   picked purely by row count:
#
#     0 rows       → "No results found."
#     1–5 rows     → the whole table
#     6–20 rows    → the whole table, captioned as the complete dataset
#     > 20 rows    → first 3 + last 2 rows, the true total, and guidance to
#                    work with the data instead of printing it
#
#   Large results never get concatenated into the output in full.  If the
#   caller persisted them (see core/csv_store.py), the file path is shown
#   in place of the bulk data.
#
# Everything here is a pure function of its inputs.
# =============================================================================

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Iterable, Optional, Sequence

from core.models import Row

# Row-count thresholds for each presentation strategy
SMALL_RESULT_MAX_ROWS = 5
MEDIUM_RESULT_MAX_ROWS = 20
SAMPLE_HEAD_ROWS = 3
SAMPLE_TAIL_ROWS = 2

NO_RESULTS_MESSAGE = "No results found."

# Shown with a saved CSV so the client asks the user before doing anything bulky
HANDLING_MENU = (
    "**Ask the user:** How would you like me to handle this data?\n\n"
    "1. **Show on screen** - Display the data in a formatted table\n"
    "2. **Provide download link** - The file is already saved at the path above\n"
    "3. **Work with data** - Analyze, visualize, or process the data programmatically"
)

# Maximum fraction digits for floats, matching en-US locale number output
_MAX_FRACTION_DIGITS = 3
_QUANTUM = Decimal("0.001")


def format_number(value: Any) -> str:
    """Render a number with thousands separators, en-US style.

    Integers are grouped (1234567 → "1,234,567").  Floats are rounded to at
    most three fraction digits with trailing zeros dropped
    (1234.5678 → "1,234.568", 2.50 → "2.5").
    """
    if isinstance(value, int):
        return f"{value:,}"
    if value != value or value in (float("inf"), float("-inf")):
        # NaN / infinity have no grouped form
        return str(value)
    number = Decimal(str(value))
    with localcontext() as ctx:
        # Enough digits for the integer part plus the fraction being kept
        ctx.prec = max(ctx.prec, number.adjusted() + _MAX_FRACTION_DIGITS + 2)
        rounded = number.quantize(_QUANTUM, rounding=ROUND_HALF_UP)
    text = f"{rounded:,.{_MAX_FRACTION_DIGITS}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def format_cell(value: Any) -> str:
    """Render a single cell value for display."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return format_number(value)
    return str(value)


def _table(rows: Iterable[Row], columns: Sequence[str]) -> str:
    lines = [
        " | ".join(columns),
        " | ".join("---" for _ in columns),
    ]
    for row in rows:
        lines.append(" | ".join(format_cell(row.get(column)) for column in columns))
    return "```\n" + "\n".join(lines) + "\n```"


def render(
    rows: Optional[Sequence[Row]],
    columns: Sequence[str],
    csv_path: Optional[str] = None,
) -> str:
    """Render a result set as chat-sized text.

    Args:
        rows: Ordered rows, each a mapping of column name to value.
        columns: Display order.  Columns missing from a row render as "null".
        csv_path: Where the full result set was saved, if it was.  Only
            used for large results.

    Returns:
        The formatted text.
    """
    if not rows:
        return NO_RESULTS_MESSAGE

    total = len(rows)

    if total <= SMALL_RESULT_MAX_ROWS:
        return _table(rows, columns)

    if total <= MEDIUM_RESULT_MAX_ROWS:
        return f"Complete dataset ({total} rows):\n\n" + _table(rows, columns)

    return _render_large(rows, columns, csv_path)


def _render_large(rows: Sequence[Row], columns: Sequence[str], csv_path: Optional[str]) -> str:
    total = len(rows)
    head = rows[:SAMPLE_HEAD_ROWS]
    tail = rows[max(SAMPLE_HEAD_ROWS, total - SAMPLE_TAIL_ROWS):]

    parts = [
        f"**Large Dataset Retrieved** ({total:,} total rows)",
        "🚫 **Do not print this entire dataset - it will be very slow!**",
    ]
    if csv_path:
        parts.append(
            f"💾 **Full dataset saved to:** `{csv_path}`\n"
            "Read the file directly or work with it programmatically."
        )
        parts.append(HANDLING_MENU)
    else:
        parts.append("💾 **CSV Download:** Provide a link to download this data as a CSV file.")

    parts.append(f"**Sample - First {len(head)} rows:**\n" + _table(head, columns))
    if tail:
        parts.append(f"**Last {len(tail)} rows:**\n" + _table(tail, columns))

    parts.append(
        f"📊 **Full dataset contains {total:,} rows** - All data has been retrieved from the portal."
    )
    parts.append(
        "✅ **Next steps:** Use this data for analysis, create charts, calculate statistics, "
        f"or generate summaries. Do not attempt to display all {total:,} rows as it will be "
        "very slow in the chat interface."
    )
    return "\n\n".join(parts)
