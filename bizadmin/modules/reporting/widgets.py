"""Reusable Streamlit widget components for the business reporting dashboard."""

import logging
from typing import Optional

import plotly.graph_objects as go
import streamlit as st

from bizadmin.utils.formatting import humanize

logger = logging.getLogger(__name__)

PALETTE = [
    "#2563eb", "#16a34a", "#f59e0b", "#dc2626",
    "#7c3aed", "#0891b2", "#db2777", "#65a30d",
]


class ReportWidgets:
    """Collection of reusable Streamlit UI widgets for the report pages."""

    SECTION_ICONS = {
        "employees": "\U0001f465",
        "finance": "\U0001f4b0",
        "procurement": "\U0001f6d2",
        "projects": "\U0001f4c1",
        "files": "\U0001f4c4",
        "sales": "\U0001f4c8",
    }

    @staticmethod
    def _delta_html(delta: Optional[str]) -> str:
        if delta is None:
            return ""
        d = str(delta).strip()
        is_positive = not d.startswith("-")
        arrow = "&#8593;" if is_positive else "&#8595;"
        clr = "#22c55e" if is_positive else "#ef4444"
        return "".join([
            '<div style="font-size:13px;margin-top:4px;color:',
            clr, '">', arrow, ' ', d, '</div>',
        ])

    @staticmethod
    def metric_card(
        title: str,
        value: str,
        delta: Optional[str] = None,
        icon: str = "",
    ) -> None:
        """Render a styled metric card with optional delta line."""
        icon_part = ""
        if icon:
            icon_part = '<span style="font-size:24px;margin-right:6px">' + icon + '</span>'

        card = "".join([
            '<div style="background:#fff;border:1px solid #e5e7eb;border-radius:12px;',
            'padding:20px;box-shadow:0 1px 3px rgba(0,0,0,0.06);margin-bottom:8px">',
            '<div style="display:flex;align-items:center;margin-bottom:8px">',
            icon_part,
            '<span style="font-size:14px;color:#6b7280;font-weight:500">',
            str(title), '</span></div>',
            '<div style="font-size:28px;font-weight:700;color:#111827">',
            str(value), '</div>',
            ReportWidgets._delta_html(delta),
            '</div>',
        ])
        st.markdown(card, unsafe_allow_html=True)

    @staticmethod
    def metric_row(cards: list) -> None:
        """Render ``(title, value, icon)`` tuples as one row of metric cards."""
        if not cards:
            return
        cols = st.columns(len(cards))
        for col, (title, value, icon) in zip(cols, cards):
            with col:
                ReportWidgets.metric_card(title, value, icon=icon)

    @staticmethod
    def failure_banner(failures: dict) -> None:
        """List the report sections that fell back to zero values."""
        if not failures:
            return
        items = "".join(
            '<li><b>' + humanize(name) + '</b>: ' + str(reason) + '</li>'
            for name, reason in failures.items()
        )
        html = "".join([
            '<div style="background:#fef2f2;border:1px solid #fecaca;border-radius:10px;',
            'padding:12px 16px;color:#991b1b;margin-bottom:12px">',
            '<div style="font-weight:600;margin-bottom:4px">',
            'Some sections could not be loaded and show zero values</div>',
            '<ul style="margin:0;padding-left:18px;font-size:13px">', items, '</ul>',
            '</div>',
        ])
        st.markdown(html, unsafe_allow_html=True)

    @staticmethod
    def bar_chart(data: dict, title: str, value_label: str = "Count") -> None:
        """Render a Plotly bar chart from a ``{label: value}`` mapping."""
        if not data:
            st.info("No data available for '" + title + "'.")
            return

        labels = [humanize(k) for k in data.keys()]
        values = [float(v) for v in data.values()]
        fig = go.Figure()
        fig.add_trace(
            go.Bar(
                x=labels,
                y=values,
                marker_color=[PALETTE[i % len(PALETTE)] for i in range(len(labels))],
                hovertemplate="%{x}<br>" + value_label + ": %{y}<extra></extra>",
            )
        )
        fig.update_layout(
            title=dict(text=title, font=dict(size=16, color="#111827")),
            yaxis_title=value_label,
            template="plotly_white",
            height=340,
            margin=dict(l=40, r=20, t=50, b=40),
            showlegend=False,
        )
        st.plotly_chart(fig, use_container_width=True)

    @staticmethod
    def donut_chart(data: dict, title: str) -> None:
        """Render a Plotly donut chart from a ``{label: value}`` mapping."""
        values = [float(v) for v in data.values()] if data else []
        if not values or sum(values) <= 0:
            st.info("No data available for '" + title + "'.")
            return

        fig = go.Figure(
            go.Pie(
                labels=[humanize(k) for k in data.keys()],
                values=values,
                hole=0.5,
                marker=dict(colors=PALETTE),
                textinfo="percent",
            )
        )
        fig.update_layout(
            title=dict(text=title, font=dict(size=16, color="#111827")),
            template="plotly_white",
            height=340,
            margin=dict(l=20, r=20, t=50, b=20),
            legend=dict(orientation="h", y=-0.1),
        )
        st.plotly_chart(fig, use_container_width=True)

    @staticmethod
    def records_table(headers: list, rows: list, empty_message: str = "No records.") -> None:
        """Render a simple striped HTML table of pre-formatted rows."""
        if not rows:
            st.info(empty_message)
            return

        th_style = 'padding:10px;text-align:left;font-size:13px;color:#6b7280'
        td_style = 'padding:8px 10px;border-bottom:1px solid #e5e7eb'

        header = "".join([
            '<thead><tr style="background:#f9fafb">',
            "".join('<th style="' + th_style + '">' + str(h) + '</th>' for h in headers),
            '</tr></thead>',
        ])

        body_rows = []
        for idx, row in enumerate(rows):
            bg = "#ffffff" if idx % 2 == 0 else "#f9fafb"
            cells = "".join('<td style="' + td_style + '">' + str(v) + '</td>' for v in row)
            body_rows.append('<tr style="background:' + bg + '">' + cells + '</tr>')

        html = "".join([
            '<table style="width:100%;border-collapse:collapse;',
            'font-size:14px;color:#374151">',
            header, '<tbody>', "\n".join(body_rows), '</tbody></table>',
        ])
        st.markdown(html, unsafe_allow_html=True)
