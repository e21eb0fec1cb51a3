"""
Markdown report for a validation run.

Passing checks come first, then errors. Within each section rows are
grouped by key in sorted order and keep their recording order inside a
key; only the first row of a key repeats the key label.
"""

from __future__ import annotations

from covenant_validator.context import ValidationContext, ValidationRecord

CHECK_STATUS = "✅"
ERROR_STATUS = "⛔️"

TABLE_HEADER = "| Key | Field | Message | Status |\n| :--- | :--- | :--- | :---: |"


def escape_cell(text: str) -> str:
    return text.replace("|", "&#124;")


def _section(records: list[ValidationRecord], status: str) -> list[str]:
    by_key: dict[str, list[ValidationRecord]] = {}
    for record in records:
        by_key.setdefault(record.key, []).append(record)

    rows = []
    for key in sorted(by_key):
        for i, record in enumerate(by_key[key]):
            rows.append(
                "| {} | {} | {} | {} |".format(
                    escape_cell(key) if i == 0 else "",
                    escape_cell(record.field or ""),
                    escape_cell(record.message),
                    status,
                )
            )
    return rows


def render_markdown_table(ctx: ValidationContext) -> str:
    records = ctx.records()
    lines = [TABLE_HEADER]
    lines.extend(_section([r for r in records if r.valid], CHECK_STATUS))
    lines.extend(_section([r for r in records if not r.valid], ERROR_STATUS))
    return "\n".join(lines) + "\n"
