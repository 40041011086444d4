"""
PDF Report Generator for Renovision

Renders a cost estimate as a one-page PDF the homeowner can download.
"""

from io import BytesIO
from datetime import datetime
from typing import List

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, HRFlowable
)
from xml.sax.saxutils import escape

from estimator import Estimate


def _money(value) -> str:
    return f"${float(value):,.2f}"


def _qty(value) -> str:
    # 2 -> "2", 2.50 -> "2.5"
    return format(value.normalize(), "f") if hasattr(value, "normalize") else str(value)


class PDFReportGenerator:
    """Generates PDF reports for renovation cost estimates."""

    # Brand colors
    PRIMARY_COLOR = colors.HexColor('#2563EB')  # Blue
    SECONDARY_COLOR = colors.HexColor('#1F2937')  # Dark gray
    LIGHT_GRAY = colors.HexColor('#F3F4F6')
    BORDER_COLOR = colors.HexColor('#E5E7EB')

    def __init__(self):
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        """Setup custom paragraph styles."""
        self.styles.add(ParagraphStyle(
            name='ReportTitle',
            parent=self.styles['Heading1'],
            fontSize=24,
            textColor=self.SECONDARY_COLOR,
            spaceAfter=20,
            alignment=TA_LEFT
        ))

        self.styles.add(ParagraphStyle(
            name='ReportSection',
            parent=self.styles['Heading2'],
            fontSize=14,
            textColor=self.SECONDARY_COLOR,
            spaceBefore=20,
            spaceAfter=10
        ))

        self.styles.add(ParagraphStyle(
            name='ReportBody',
            parent=self.styles['Normal'],
            fontSize=10,
            textColor=self.SECONDARY_COLOR,
            spaceAfter=6
        ))

        self.styles.add(ParagraphStyle(
            name='ReportSmall',
            parent=self.styles['Normal'],
            fontSize=8,
            textColor=colors.gray,
            spaceAfter=4
        ))

        self.styles.add(ParagraphStyle(
            name='ReportFooter',
            parent=self.styles['Normal'],
            fontSize=8,
            textColor=colors.gray,
            alignment=TA_CENTER
        ))

    def generate_report(self, estimate: Estimate, project_name: str = "Renovation Estimate") -> BytesIO:
        """
        Generate a PDF report for a cost estimate.

        Returns: BytesIO buffer containing the PDF
        """
        buffer = BytesIO()

        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            rightMargin=0.75*inch,
            leftMargin=0.75*inch,
            topMargin=0.75*inch,
            bottomMargin=0.75*inch,
            title=project_name
        )

        story = []
        story.extend(self._build_header(project_name, estimate.region_code))
        story.extend(self._build_summary(estimate))
        story.extend(self._build_line_table('Materials', estimate.materials, 'Item'))
        story.extend(self._build_line_table('Labor', estimate.labor, 'Description'))
        story.extend(self._build_totals(estimate))
        story.extend(self._build_footer(estimate.notes))

        doc.build(story)
        buffer.seek(0)
        return buffer

    def _build_header(self, project_name: str, region_code: str) -> List:
        elements = []

        elements.append(Paragraph(
            '<font color="#2563EB"><b>Renovision</b></font>',
            ParagraphStyle(
                name='Brand',
                fontSize=20,
                textColor=self.PRIMARY_COLOR,
                spaceAfter=5
            )
        ))

        elements.append(Spacer(1, 20))

        elements.append(Paragraph('<b>Renovation Cost Estimate</b>', self.styles['ReportTitle']))
        elements.append(Paragraph(f'<b>Project:</b> {escape(project_name)}', self.styles['ReportBody']))
        elements.append(Paragraph(f'<b>ZIP / Region:</b> {escape(region_code)}', self.styles['ReportBody']))
        elements.append(Paragraph(
            f'<b>Generated:</b> {datetime.now().strftime("%B %d, %Y at %I:%M %p")}',
            self.styles['ReportBody']
        ))

        elements.append(Spacer(1, 10))
        elements.append(HRFlowable(
            width="100%",
            thickness=1,
            color=self.BORDER_COLOR,
            spaceAfter=20
        ))

        return elements

    def _build_summary(self, estimate: Estimate) -> List:
        elements = []

        elements.append(Paragraph('Project Summary', self.styles['ReportSection']))

        summary_data = [
            ['Line Items', str(len(estimate.materials))],
            ['Platform Fee', f'{_qty(estimate.platform_fee_percent)}%'],
            ['Estimated Total', _money(estimate.total_project_cost)],
        ]

        table = Table(summary_data, colWidths=[2*inch, 2*inch])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (0, -1), self.LIGHT_GRAY),
            ('TEXTCOLOR', (0, 0), (-1, -1), self.SECONDARY_COLOR),
            ('ALIGN', (0, 0), (0, -1), 'LEFT'),
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTNAME', (1, -1), (1, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 10),
            ('FONTSIZE', (1, -1), (1, -1), 14),
            ('TEXTCOLOR', (1, -1), (1, -1), self.PRIMARY_COLOR),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 8),
            ('TOPPADDING', (0, 0), (-1, -1), 8),
            ('GRID', (0, 0), (-1, -1), 0.5, self.BORDER_COLOR),
        ]))

        elements.append(table)
        elements.append(Spacer(1, 20))

        return elements

    def _build_line_table(self, title: str, lines: List, first_column: str) -> List:
        """Build a table of priced lines (materials or labor)."""
        elements = []

        elements.append(Paragraph(title, self.styles['ReportSection']))

        data = [[first_column, 'Qty', 'Unit Cost', 'Total']]
        for line in lines:
            unit = getattr(line, 'unit', None)
            qty = _qty(line.quantity) + (f" {unit}" if unit else "")
            data.append([
                Paragraph(escape(line.item), self.styles['ReportBody']),
                qty,
                _money(line.unit_cost),
                _money(line.total_cost),
            ])

        table = Table(data, colWidths=[3.25*inch, 1.1*inch, 1.1*inch, 1.25*inch])
        table.setStyle(TableStyle([
            # Header
            ('BACKGROUND', (0, 0), (-1, 0), self.PRIMARY_COLOR),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, 0), 10),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
            ('TOPPADDING', (0, 0), (-1, 0), 8),
            # Body
            ('TEXTCOLOR', (0, 1), (-1, -1), self.SECONDARY_COLOR),
            ('FONTSIZE', (0, 1), (-1, -1), 9),
            ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, self.LIGHT_GRAY]),
            ('GRID', (0, 0), (-1, -1), 0.5, self.BORDER_COLOR),
        ]))

        elements.append(table)
        elements.append(Spacer(1, 10))

        return elements

    def _build_totals(self, estimate: Estimate) -> List:
        elements = []

        summary_data = [
            ['Materials Subtotal', _money(estimate.total_material_cost)],
            ['Labor Subtotal', _money(estimate.total_labor_cost)],
            ['Subtotal', _money(estimate.subtotal)],
            [f'Platform Fee ({_qty(estimate.platform_fee_percent)}%)', _money(estimate.platform_fee)],
            ['Total Project Cost', _money(estimate.total_project_cost)],
        ]

        summary_table = Table(summary_data, colWidths=[2*inch, 1.5*inch])
        summary_table.setStyle(TableStyle([
            ('ALIGN', (0, 0), (-1, -1), 'RIGHT'),
            ('FONTSIZE', (0, 0), (-1, -1), 10),
            ('TEXTCOLOR', (0, 0), (-1, -1), self.SECONDARY_COLOR),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
            ('TOPPADDING', (0, 0), (-1, -1), 6),
            # Grand total row
            ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, -1), (-1, -1), 12),
            ('TEXTCOLOR', (1, -1), (1, -1), self.PRIMARY_COLOR),
            ('LINEABOVE', (0, -1), (-1, -1), 1, self.BORDER_COLOR),
        ]))

        # Right-align the summary table
        summary_wrapper = Table([[summary_table]], colWidths=[7*inch])
        summary_wrapper.setStyle(TableStyle([
            ('ALIGN', (0, 0), (0, 0), 'RIGHT'),
        ]))

        elements.append(Spacer(1, 10))
        elements.append(summary_wrapper)
        elements.append(Spacer(1, 20))

        return elements

    def _build_footer(self, notes: str) -> List:
        elements = []

        elements.append(HRFlowable(
            width="100%",
            thickness=1,
            color=self.BORDER_COLOR,
            spaceBefore=20,
            spaceAfter=15
        ))

        elements.append(Paragraph(f'<b>Disclaimer:</b> {escape(notes)}', self.styles['ReportSmall']))
        elements.append(Spacer(1, 15))
        elements.append(Paragraph('Generated by Renovision', self.styles['ReportFooter']))

        return elements
