"""Named chart regions rendered as matplotlib figures from a report payload.

The dashboard draws its interactive charts with Plotly; the registry here
backs the chart-snapshot export, where every region becomes one PNG page.
"""

import logging
from typing import Any, Callable, Iterator, Optional

from bizadmin.utils.formatting import humanize
from bizadmin.utils.pdf_report_builder import CHART_PALETTE

logger = logging.getLogger(__name__)

ChartBuilder = Callable[[Any], Any]


def _new_figure(figsize):
    """A standalone Agg-backed figure; nothing is registered with pyplot."""
    from matplotlib.backends.backend_agg import FigureCanvasAgg
    from matplotlib.figure import Figure

    fig = Figure(figsize=figsize)
    FigureCanvasAgg(fig)
    return fig, fig.add_subplot()


def _colors(n: int) -> list[str]:
    return [CHART_PALETTE[i % len(CHART_PALETTE)] for i in range(n)]


def _bar_figure(labels, values, title, ylabel=""):
    fig, ax = _new_figure((8, 4.5))
    if labels:
        ax.bar(range(len(labels)), values, color=_colors(len(labels)), width=0.6)
        ax.set_xticks(range(len(labels)))
        ax.set_xticklabels([str(lb) for lb in labels], rotation=30, ha="right", fontsize=9)
    else:
        ax.text(0.5, 0.5, "No data", ha="center", va="center", transform=ax.transAxes)
        ax.set_xticks([])
    ax.set_title(title, fontsize=13, fontweight="bold", pad=12)
    if ylabel:
        ax.set_ylabel(ylabel, fontsize=10)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.grid(axis="y", alpha=0.3)
    fig.tight_layout()
    return fig


def _pie_figure(labels, values, title):
    fig, ax = _new_figure((6, 5))
    if labels and sum(values) > 0:
        ax.pie(
            values,
            labels=[str(lb) for lb in labels],
            colors=_colors(len(labels)),
            autopct="%1.1f%%",
            startangle=90,
            textprops={"fontsize": 9},
        )
    else:
        ax.text(0.5, 0.5, "No data", ha="center", va="center", transform=ax.transAxes)
        ax.axis("off")
    ax.set_title(title, fontsize=13, fontweight="bold", pad=14)
    fig.tight_layout()
    return fig


# ---------------------------------------------------------------------------
# Region builders
# ---------------------------------------------------------------------------

def finance_overview(payload):
    finance = payload.finance
    labels = ["Total Revenue", "Paid Revenue", "Total Expenses", "Net Profit"]
    values = [
        float(finance.total_revenue),
        float(finance.paid_revenue),
        float(finance.total_expenses),
        float(finance.net_profit),
    ]
    return _bar_figure(labels, values, "Financial Overview", ylabel="Amount")


def expenses_by_category(payload):
    data = payload.finance.expenses_by_category
    return _pie_figure(
        [humanize(k) for k in data], [float(v) for v in data.values()], "Expenses by Category"
    )


def employees_by_department(payload):
    data = payload.employees.departments
    return _bar_figure(list(data), list(data.values()), "Active Employees by Department")


def projects_by_status(payload):
    data = payload.projects.projects_by_status
    return _pie_figure([humanize(k) for k in data], list(data.values()), "Projects by Status")


def tasks_by_status(payload):
    data = payload.projects.tasks_by_status
    return _bar_figure([humanize(k) for k in data], list(data.values()), "Tasks by Status")


def procurement_by_status(payload):
    procurement = payload.procurement
    labels = ["Pending Approval", "Approved", "Rejected"]
    values = [procurement.pending, procurement.approved, procurement.rejected]
    return _bar_figure(labels, values, "Procurement Requests")


DEFAULT_REGIONS: dict[str, tuple[str, ChartBuilder]] = {
    "finance_overview": ("Financial Overview", finance_overview),
    "expenses_by_category": ("Expenses by Category", expenses_by_category),
    "employees_by_department": ("Employees by Department", employees_by_department),
    "projects_by_status": ("Projects by Status", projects_by_status),
    "tasks_by_status": ("Tasks by Status", tasks_by_status),
    "procurement_by_status": ("Procurement by Status", procurement_by_status),
}


class ChartRegistry:
    """Maps stable region keys to ``(title, builder)`` pairs."""

    def __init__(self, regions: Optional[dict[str, tuple[str, ChartBuilder]]] = None) -> None:
        self._regions = dict(DEFAULT_REGIONS if regions is None else regions)

    def register(self, key: str, title: str, builder: ChartBuilder) -> None:
        self._regions[key] = (title, builder)

    def keys(self) -> list[str]:
        return list(self._regions)

    def __contains__(self, key: str) -> bool:
        return key in self._regions

    def __iter__(self) -> Iterator[str]:
        return iter(self._regions)

    def title(self, key: str) -> str:
        return self._regions[key][0]

    def build(self, key: str, payload):
        """Build the figure for *key*.  Raises ``KeyError`` for an unknown key."""
        _, builder = self._regions[key]
        return builder(payload)
