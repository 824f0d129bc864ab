"""CSV export helpers for period reports."""

from __future__ import annotations

import csv
import io
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from .formatting import format_date, format_money_plain, format_timestamp

if TYPE_CHECKING:  # pragma: no cover - import guard for circular dependency
    from .reports import Report

BOM = "\ufeff"


def atomic_write_text(output_path: Path, content: str) -> Path:
    """Write ``content`` via a temp file in the same directory, then rename over the target.

    A failure part-way never leaves a truncated file at ``output_path``.
    """

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=output_path.parent, prefix=".", suffix=".part")
    try:
        # Use newline='' so CRLF record separators are written as-is
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        os.replace(tmp_name, output_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return output_path


def render_report_csv(report: "Report") -> str:
    """Return the report as spreadsheet-friendly CSV text.

    Leading BOM, CRLF rows, every field quoted with embedded quotes doubled,
    amounts as plain two-decimal numbers.
    """

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\r\n")

    writer.writerow([f"{report.title} Report"])
    writer.writerow([report.label])
    writer.writerow(["Generated", format_timestamp(report.generated_at)])
    writer.writerow([])
    writer.writerow(["Total Entries", report.summary.count])
    writer.writerow([f"Total {report.title}", format_money_plain(report.summary.total)])
    writer.writerow([])

    writer.writerow(["Summary by Account"])
    writer.writerow(["#", "Account Code", "Account Name", "Count", "Total"])
    for idx, row in enumerate(report.summary.rows_by_code(), start=1):
        writer.writerow(
            [idx, row.account_code, row.account_name, row.count, format_money_plain(row.total)]
        )
    writer.writerow([])

    writer.writerow(["List of Transactions"])
    writer.writerow(
        ["#", "Date", "Type", report.counterparty_label, "Account", "Reference", "Description", "Amount"]
    )
    for idx, tx in enumerate(report.rows, start=1):
        writer.writerow(
            [
                idx,
                format_date(tx.date),
                tx.kind,
                tx.counterparty_name or "",
                tx.account_label,
                "" if tx.reference is None else tx.reference,
                tx.description or "",
                format_money_plain(tx.amount),
            ]
        )

    return BOM + buffer.getvalue()


def export_report_csv(*, report: "Report", output_dir: Path) -> Path:
    """Write the report CSV under ``output_dir`` using its suggested filename."""

    return atomic_write_text(Path(output_dir) / report.filename("csv"), render_report_csv(report))
