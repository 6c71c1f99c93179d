# -*- coding: utf-8 -*-
"""PDF Report Builder for business reports.

Builder-pattern class that assembles an HTML document (header block,
data tables, embedded matplotlib charts) and converts it to PDF bytes
via xhtml2pdf.
"""
from __future__ import annotations

import datetime
from io import BytesIO
from typing import Any, Iterable, Optional, Sequence


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
_COLORS = {
    'navy': '#0f172a',
    'blue': '#2563eb',
    'blue_light': '#3b82f6',
    'gray': '#64748b',
    'gray_light': '#f1f5f9',
    'white': '#ffffff',
    'text': '#1e293b',
    'text_light': '#475569',
    'border': '#e2e8f0',
}

CHART_PALETTE = [
    '#2563eb', '#16a34a', '#ca8a04', '#dc2626', '#7c3aed',
    '#0891b2', '#db2777', '#ea580c', '#4f46e5', '#059669',
]


def _escape_html(text):
    """Escape HTML special characters."""
    if text is None:
        return ''
    return (
        str(text)
        .replace('&', '&amp;')
        .replace('<', '&lt;')
        .replace('>', '&gt;')
        .replace('"', '&quot;')
    )


def _build_css():
    """Build xhtml2pdf-compatible CSS stylesheet."""
    c = _COLORS
    # xhtml2pdf only supports basic CSS 2.1
    css = """
@page {
    size: A4;
    margin: 2cm 1.5cm 2cm 1.5cm;
}
body {
    font-family: Helvetica, Arial, sans-serif;
    font-size: 10pt;
    line-height: 1.4;
    color: """ + c['text'] + """;
}
.report-header {
    margin-bottom: 16px;
    padding-bottom: 8px;
    border-bottom: 3px solid """ + c['blue'] + """;
}
.company-name {
    font-size: 18pt;
    font-weight: bold;
    color: """ + c['navy'] + """;
}
.report-title {
    font-size: 14pt;
    color: """ + c['text'] + """;
    margin-top: 4px;
}
.generated-on {
    font-size: 9pt;
    color: """ + c['text_light'] + """;
    margin-top: 4px;
}
.title-page {
    text-align: center;
    padding-top: 200px;
}
.title-page .company-name {
    font-size: 26pt;
}
.title-page .report-title {
    font-size: 18pt;
    margin-top: 12px;
}
h2 {
    font-size: 13pt;
    color: """ + c['navy'] + """;
    margin-top: 14px;
    margin-bottom: 8px;
}
table {
    width: 100%;
    border-collapse: collapse;
    margin: 8px 0;
}
th {
    background-color: """ + c['navy'] + """;
    color: """ + c['white'] + """;
    padding: 6px 8px;
    text-align: left;
    font-size: 9pt;
    font-weight: bold;
}
td {
    padding: 5px 8px;
    border-bottom: 1px solid """ + c['border'] + """;
    font-size: 9pt;
}
caption {
    font-weight: bold;
    font-size: 11pt;
    margin-bottom: 6px;
    text-align: left;
    color: """ + c['navy'] + """;
}
.empty-table {
    color: """ + c['gray'] + """;
    font-style: italic;
}
.chart-container {
    text-align: center;
    margin: 15px 0;
}
.page-break {
    page-break-before: always;
}
"""
    return css


class PDFReportBuilder:
    """Builder-pattern class for constructing tabular and chart PDF reports."""

    def __init__(self, title, company_name='', generated_at=None,
                 timestamp_format='%Y-%m-%d %H:%M:%S'):
        self._title = title
        self._company_name = company_name
        self._generated_at = generated_at or datetime.datetime.now()
        self._timestamp_format = timestamp_format
        self._sections = []

    @property
    def generated_label(self):
        return 'Generated on: {0}'.format(
            self._generated_at.strftime(self._timestamp_format)
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def fig_to_png(fig, dpi=150):
        """Rasterise a matplotlib figure to PNG bytes."""
        buf = BytesIO()
        fig.savefig(
            buf, format='png', dpi=dpi,
            bbox_inches='tight', facecolor='white',
        )
        return buf.getvalue()

    @staticmethod
    def _img_tag(png_bytes, width=480):
        import base64

        b64 = base64.b64encode(png_bytes).decode('utf-8')
        return (
            '<div class="chart-container">'
            '<img src="data:image/png;base64,{b64}" width="{width}" alt="chart">'
            '</div>'
        ).format(b64=b64, width=width)

    def _append(self, html):
        self._sections.append({'type': 'raw', 'html': html})

    # ------------------------------------------------------------------
    # Content methods (builder pattern - each returns self)
    # ------------------------------------------------------------------
    def add_header_block(self):
        """Company name, report title and generation timestamp."""
        html = (
            '<div class="report-header">'
            '<div class="company-name">{company}</div>'
            '<div class="report-title">{title}</div>'
            '<div class="generated-on">{generated}</div>'
            '</div>'
        ).format(
            company=_escape_html(self._company_name),
            title=_escape_html(self._title),
            generated=_escape_html(self.generated_label),
        )
        self._append(html)
        return self

    def add_title_page(self, subtitle=''):
        """Full title page; following content starts on a new page."""
        html = (
            '<div class="title-page">'
            '<div class="company-name">{company}</div>'
            '<div class="report-title">{title}</div>'
            '<div class="generated-on">{subtitle}</div>'
            '<div class="generated-on">{generated}</div>'
            '</div>'
        ).format(
            company=_escape_html(self._company_name),
            title=_escape_html(self._title),
            subtitle=_escape_html(subtitle),
            generated=_escape_html(self.generated_label),
        )
        self._append(html)
        return self

    def add_heading(self, text):
        self._append('<h2>{0}</h2>'.format(_escape_html(text)))
        return self

    def add_table(self, headers: Sequence[str], rows: Iterable[Sequence[Any]], caption=''):
        """Add a styled data table.  An empty ``rows`` keeps the header row."""
        parts = ['<table repeat="1">']
        if caption:
            parts.append('<caption>{0}</caption>'.format(_escape_html(caption)))
        hdr_cells = ''.join(
            '<th>{0}</th>'.format(_escape_html(str(h))) for h in headers
        )
        parts.append('<thead><tr>{0}</tr></thead>'.format(hdr_cells))
        parts.append('<tbody>')
        count = 0
        for row in rows:
            count += 1
            cells = ''.join(
                '<td>{0}</td>'.format(_escape_html(v)) for v in row
            )
            parts.append('<tr>{0}</tr>'.format(cells))
        parts.append('</tbody></table>')
        if count == 0:
            parts.append('<p class="empty-table">No records.</p>')
        self._append('\n'.join(parts))
        return self

    def add_image(self, png_bytes, caption=''):
        """Embed a PNG at full page width."""
        if caption:
            self.add_heading(caption)
        self._append(self._img_tag(png_bytes))
        return self

    def add_page_break(self):
        """Start the next section on a new page."""
        self._append('<div class="page-break"></div>')
        return self

    # ------------------------------------------------------------------
    # Build methods
    # ------------------------------------------------------------------
    def build_html(self):
        """Build the complete HTML document."""
        body = '\n'.join(section.get('html', '') for section in self._sections)
        html = (
            '<!DOCTYPE html>\n'
            '<html lang="en">\n'
            '<head>\n'
            '<meta charset="utf-8">\n'
            '<title>{title}</title>\n'
            '<style>{css}</style>\n'
            '</head>\n'
            '<body>\n'
            '{body}\n'
            '</body>\n'
            '</html>'
        ).format(
            title=_escape_html(self._title),
            css=_build_css(),
            body=body,
        )
        return html

    def build_pdf_bytes(self):
        """Render the document and return the PDF as bytes."""
        from xhtml2pdf import pisa

        html_content = self.build_html()
        buf = BytesIO()
        result = pisa.CreatePDF(html_content, dest=buf, encoding='utf-8')
        if result.err:
            raise RuntimeError(
                'xhtml2pdf conversion had {0} error(s)'.format(result.err)
            )
        return buf.getvalue()
