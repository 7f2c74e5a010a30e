from datetime import datetime
from typing import List, Literal, Optional, Sequence

ALIGN_MARKERS = {"l": ":---", "c": ":---:", "r": "---:"}


def generate_markdown_table(
    headers: Sequence[object],
    rows: Sequence[Sequence[object]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Build a Markdown table. Cells are converted with str(); pipes are escaped.

    Returns "" when there are no rows.
    """
    if not rows:
        return ""

    def cell(value: object) -> str:
        return str(value).replace("|", "\\|")

    aligns = aligns or ["l"] * len(headers)
    if len(aligns) != len(headers):
        raise ValueError("Length of aligns must match number of headers.")

    lines = [
        "| " + " | ".join(cell(h) for h in headers) + " |",
        "| " + " | ".join(ALIGN_MARKERS[a] for a in aligns) + " |",
    ]
    lines += ["| " + " | ".join(cell(v) for v in row) + " |" for row in rows]
    return "\n".join(lines)


def format_date(when: datetime) -> str:
    """e.g. "Oct 19, 2026, 02:05 PM", in local time."""
    return when.astimezone().strftime("%b %d, %Y, %I:%M %p")


def format_price(amount: float) -> str:
    return f"₹{amount:,.2f}".removesuffix(".00")
