"""
Export service for generating PDF and CSV exports of ranked ideas
"""
import csv
import io
from typing import List
from reportlab.lib.pagesizes import letter
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib import colors
from xml.sax.saxutils import escape
from app.models import RankedIdea
from app.logging_config import logger

CSV_FIELDS = [
    'rank', 'composite_score', 'name', 'one_liner', 'platform',
    'primary_keyword', 'monthly_search_volume', 'competition_level',
    'success_probability', 'estimated_revenue_low_usd',
    'estimated_revenue_high_usd', 'time_to_mvp_months', 'chosen', 'built', 'sold'
]


class ExportService:
    """Service for exporting ranked ideas to various formats"""

    def __init__(self):
        self.styles = getSampleStyleSheet()

    def export_to_csv(self, ideas: List[RankedIdea]) -> str:
        """
        Export ranked ideas to CSV format

        Args:
            ideas: Ranked ideas in rank order

        Returns:
            CSV content as string
        """
        if not ideas:
            return ""

        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=CSV_FIELDS, extrasaction='ignore')
        writer.writeheader()

        for idea in ideas:
            row = idea.model_dump(include=set(CSV_FIELDS))
            writer.writerow({key: '' if value is None else value for key, value in row.items()})

        csv_content = output.getvalue()
        output.close()

        logger.info(f"Exported {len(ideas)} ideas to CSV")
        return csv_content

    def export_to_pdf(self, ideas: List[RankedIdea]) -> bytes:
        """
        Export ranked ideas to PDF format

        Args:
            ideas: Ranked ideas in rank order

        Returns:
            PDF content as bytes
        """
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=letter)

        story = []

        title_style = ParagraphStyle(
            'CustomTitle',
            parent=self.styles['Heading1'],
            fontSize=24,
            spaceAfter=30,
            textColor=colors.blue
        )
        story.append(Paragraph("Idea Factory - Ranked Ideas", title_style))
        story.append(Spacer(1, 20))

        if not ideas:
            story.append(Paragraph("No ideas to export.", self.styles['Normal']))
        else:
            for idea in ideas:
                story.append(Paragraph(
                    f"#{idea.rank}: {escape(idea.name)} ({idea.composite_score:.3f})",
                    self.styles['Heading2']
                ))
                story.append(Paragraph(escape(idea.one_liner), self.styles['Normal']))
                story.append(Spacer(1, 8))

                signals_data = [
                    ['Success', 'Search Volume', 'Competition', 'Revenue (high)', 'Platform'],
                    [
                        f"{idea.success_probability}%",
                        f"{idea.monthly_search_volume or 0:,}",
                        idea.competition_level or 'n/a',
                        f"${idea.estimated_revenue_high_usd or 0:,.0f}",
                        idea.platform
                    ]
                ]

                signals_table = Table(signals_data)
                signals_table.setStyle(TableStyle([
                    ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
                    ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
                    ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
                    ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
                    ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
                    ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
                    ('GRID', (0, 0), (-1, -1), 1, colors.black)
                ]))

                story.append(signals_table)
                story.append(Spacer(1, 12))

                if idea.why_this_wins:
                    story.append(Paragraph("<b>Why this wins:</b>", self.styles['Normal']))
                    story.append(Paragraph(escape(idea.why_this_wins), self.styles['Normal']))

                story.append(Spacer(1, 20))

        doc.build(story)
        pdf_content = buffer.getvalue()
        buffer.close()

        logger.info(f"Exported {len(ideas)} ideas to PDF")
        return pdf_content
