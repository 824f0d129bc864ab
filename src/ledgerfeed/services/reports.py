"""Period reports over a reconciled feed: data, printable HTML, and charts."""

from __future__ import annotations

import logging
import webbrowser
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Optional, Protocol, Sequence

import matplotlib.pyplot as plt
from jinja2 import Environment
from matplotlib.figure import Figure

from ..errors import ExportBlocked
from ..models.transaction import INCOME, FeedKind, Transaction
from .aggregates import AccountSummary, FeedAggregate, aggregate
from .export_csv import atomic_write_text
from .formatting import DEFAULT_CURRENCY_SYMBOL, format_currency, format_date, format_timestamp
from .ledger_service import filter_by_date_range
from .periods import DateLike, resolve_period

logger = logging.getLogger(__name__)


@dataclass
class Report:
    feed: FeedKind
    start_date: str
    end_date: str
    label: str
    rows: list[Transaction]
    summary: FeedAggregate
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def title(self) -> str:
        return feed_title(self.feed)

    @property
    def counterparty_label(self) -> str:
        return "Client" if self.feed == INCOME else "Supplier"

    def filename(self, extension: str = "csv") -> str:
        return f"{self.title}_Report_{self.start_date}_to_{self.end_date}.{extension}"


def feed_title(feed: FeedKind) -> str:
    return "Income" if feed == INCOME else "Expenses"


def generate_report(
    feed: FeedKind,
    transactions: Iterable[Transaction],
    period: str,
    custom_range: Optional[tuple[DateLike, DateLike]] = None,
    *,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Report:
    """Resolve ``period`` and collect the feed rows that fall inside it.

    Raises:
        ValidationError: when a custom range is missing a bound.
    """

    custom_start, custom_end = custom_range if custom_range else (None, None)
    date_range = resolve_period(period, today=today, custom_start=custom_start, custom_end=custom_end)
    rows = filter_by_date_range(transactions, date_range.start_iso, date_range.end_iso)
    report = Report(
        feed=feed,
        start_date=date_range.start_iso,
        end_date=date_range.end_iso,
        label=date_range.label,
        rows=rows,
        summary=aggregate(rows),
        generated_at=now or datetime.now(),
    )
    logger.info(
        "Generated %s report",
        feed,
        extra={"period": period, "start": report.start_date, "end": report.end_date, "rows": len(rows)},
    )
    return report


_REPORT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <title>{{ title }} Report - {{ label }}</title>
  <style>
    * { box-sizing: border-box; }
    body { font-family: "Segoe UI", "Helvetica Neue", Arial, sans-serif; font-size: 11px; color: #1e293b; margin: 0; padding: 20px; line-height: 1.4; }
    .report-header { background: #1e3a5f; color: #fff; padding: 16px 24px; margin: -20px -20px 20px -20px; border-bottom: 3px solid #334155; }
    .report-header h1 { margin: 0; font-size: 18px; font-weight: 700; }
    .report-header .sub { margin-top: 4px; font-size: 12px; opacity: 0.9; }
    .report-meta { margin-bottom: 16px; padding: 12px 16px; background: #f8fafc; border: 1px solid #e2e8f0; border-left: 4px solid #1e3a5f; }
    .summary-box { display: flex; flex-wrap: wrap; gap: 24px 32px; margin-bottom: 16px; padding: 12px 16px; background: #f1f5f9; border: 1px solid #e2e8f0; border-radius: 6px; }
    .summary-box span { font-weight: 600; color: #334155; }
    table { border-collapse: collapse; width: 100%; margin-bottom: 16px; }
    th, td { border: 1px solid #cbd5e1; padding: 8px 10px; text-align: left; }
    th { background: #1e3a5f; color: #fff; font-weight: 600; font-size: 10px; text-transform: uppercase; }
    .cell-num { text-align: center; width: 4%; }
    .cell-amt { text-align: right; white-space: nowrap; }
    tbody tr:nth-child(even) { background: #f8fafc; }
    .section-title { font-size: 12px; font-weight: 700; color: #1e3a5f; margin: 20px 0 8px 0; }
    .report-footer { margin-top: 24px; padding-top: 12px; border-top: 1px solid #e2e8f0; font-size: 10px; color: #64748b; }
  </style>
</head>
<body>
  <div class="report-header">
    <h1>{{ title }} Report</h1>
    <div class="sub">{{ label }}</div>
  </div>
  <div class="report-meta"><strong>Generated:</strong> {{ generated }}</div>
  <div class="summary-box">
    <span>Period:</span> {{ label }}
    <span>Total Transactions:</span> {{ count }}
    <span>Total {{ title }}:</span> {{ grand_total }}
  </div>
  <div class="section-title">Summary by Account</div>
  <table>
    <thead>
      <tr><th>#</th><th>Account Code</th><th>Account Name</th><th>Count</th><th>Total</th></tr>
    </thead>
    <tbody>
{%- for row in account_rows %}
      <tr>
        <td class="cell-num">{{ loop.index }}</td>
        <td class="cell-text">{{ row.account_code }}</td>
        <td class="cell-text">{{ row.account_name }}</td>
        <td class="cell-num">{{ row.count }}</td>
        <td class="cell-amt">{{ money(row.total) }}</td>
      </tr>
{%- endfor %}
    </tbody>
  </table>
  <div class="section-title">List of Transactions</div>
  <table>
    <thead>
      <tr><th>#</th><th>Date</th><th>Type</th><th>{{ counterparty_label }}</th><th>Account</th><th>Reference</th><th>Description</th><th>Amount</th></tr>
    </thead>
    <tbody>
{%- for tx in rows %}
      <tr>
        <td class="cell-num">{{ loop.index }}</td>
        <td class="cell-text">{{ day(tx.date) }}</td>
        <td class="cell-text">{{ tx.kind }}</td>
        <td class="cell-text">{{ tx.counterparty_name }}</td>
        <td class="cell-text">{{ tx.account_label }}</td>
        <td class="cell-text">{{ tx.reference or "" }}</td>
        <td class="cell-text">{{ tx.description }}</td>
        <td class="cell-amt">{{ money(tx.amount) }}</td>
      </tr>
{%- endfor %}
    </tbody>
  </table>
  <div class="report-footer">{{ organization }} &middot; {{ title }} Report &middot; {{ generated }}</div>
</body>
</html>
"""

_environment = Environment(autoescape=True, keep_trailing_newline=True)
_template = _environment.from_string(_REPORT_TEMPLATE)


def render_report_html(
    report: Report,
    *,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    organization: str = "Accounting System",
) -> str:
    """Standalone printable document; every interpolated value is HTML-escaped."""

    return _template.render(
        title=report.title,
        label=report.label,
        generated=format_timestamp(report.generated_at),
        count=report.summary.count,
        grand_total=format_currency(report.summary.total, currency_symbol),
        account_rows=report.summary.rows_by_code(),
        rows=report.rows,
        counterparty_label=report.counterparty_label,
        organization=organization,
        money=lambda value: format_currency(value, currency_symbol),
        day=format_date,
    )


class PrintTarget(Protocol):
    """Something that can show an HTML document for printing."""

    def open(self, html: str, *, filename: str) -> bool:  # pragma: no cover - interface
        """Return False when the document could not be opened."""
        ...


class BrowserPrintTarget:
    """Write the report next to other exports and hand it to the system browser."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def open(self, html: str, *, filename: str) -> bool:
        path = atomic_write_text(self.output_dir / filename, html)
        return webbrowser.open(path.resolve().as_uri(), new=2)


def open_report_for_print(
    report: Report,
    target: PrintTarget,
    *,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    organization: str = "Accounting System",
) -> str:
    """Render and open the printable report; returns the rendered HTML.

    Raises:
        ExportBlocked: when the target refuses to open the document.
    """

    html = render_report_html(report, currency_symbol=currency_symbol, organization=organization)
    if not target.open(html, filename=report.filename("html")):
        raise ExportBlocked("Please allow pop-ups to open the report.")
    return html


def build_account_chart(
    rows: Sequence[AccountSummary],
    *,
    title: str = "By Account",
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> Figure:
    """Donut chart of per-account totals, largest first.

    Rows are expected in display order (``FeedAggregate.rows_by_total``).
    Accounts with a non-positive total are left out of the wedges.
    """

    items = [(row.account_code, row.account_name, row.total) for row in rows if row.total > 0]
    grand_total = sum(total for _, _, total in items)

    fig, ax = plt.subplots(figsize=(10, 7))

    if items:
        sizes = [total for _, _, total in items]
        cmap = plt.get_cmap("tab20c")
        colors = [cmap(i / max(len(sizes), 1)) for i in range(len(sizes))]

        wedges, _texts, autotexts = ax.pie(
            sizes,
            labels=None,
            autopct=lambda pct: f"{pct:.1f}%" if pct > 4 else "",
            wedgeprops=dict(width=0.45, edgecolor="white", linewidth=1.5),
            startangle=90,
            colors=colors,
            pctdistance=0.78,
        )
        for autotext in autotexts:
            autotext.set_fontsize(9)
            autotext.set_fontweight("bold")
            autotext.set_color("white")

        ax.text(0, 0.08, "Total", ha="center", va="center", fontsize=11, color="#666")
        ax.text(
            0,
            -0.08,
            format_currency(grand_total, currency_symbol),
            ha="center",
            va="center",
            fontsize=16,
            fontweight="bold",
            color="#1F2937",
        )

        legend_labels = [
            f"{code} {name}: {format_currency(total, currency_symbol)} ({total / grand_total * 100:.1f}%)"
            for code, name, total in items
        ]
        ax.legend(
            wedges,
            legend_labels,
            title="Accounts",
            loc="center left",
            bbox_to_anchor=(1.02, 0.5),
            fontsize=9,
            framealpha=0.9,
        )
        ax.axis("equal")
        ax.set_title(title, fontsize=16, fontweight="bold", pad=20)
    else:
        ax.text(0.5, 0.5, "No data for this period", ha="center", va="center", fontsize=14, color="#666")
        ax.axis("off")

    fig.tight_layout()
    return fig


def export_account_chart_png(
    report: Report, *, output_path: Path, currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
) -> Path:
    """Render the report's by-account totals to PNG and return the path."""

    fig = build_account_chart(
        report.summary.rows_by_total(),
        title=f"{report.title} by Account",
        currency_symbol=currency_symbol,
    )
    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        fig.savefig(output_path, bbox_inches="tight", dpi=120)
    finally:
        plt.close(fig)
    return output_path
