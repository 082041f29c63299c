"""PDF rendering of completion certificates with reportlab."""

import io
from dataclasses import dataclass
from datetime import datetime

import structlog
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.pdfgen import canvas

from src.core.exceptions import RenderError


logger = structlog.get_logger(__name__)

PAGE_SIZE = landscape(A4)

TITLE_COLOR = colors.HexColor("#2c3e50")
NAME_COLOR = colors.HexColor("#16a085")
COURSE_COLOR = colors.HexColor("#e74c3c")
MUTED_COLOR = colors.HexColor("#7f8c8d")


@dataclass(frozen=True)
class CertificateTemplateData:
    """Values printed on a certificate."""

    certificate_id: str
    student_name: str
    course_title: str
    issued_at: datetime
    verify_url: str | None = None


class CertificateRenderer:
    """Draws a landscape A4 certificate and returns the PDF bytes."""

    def __init__(self, page_size: tuple[float, float] = PAGE_SIZE):
        self.page_size = page_size

    def render(self, data: CertificateTemplateData) -> bytes:
        """Render a certificate.

        Blocking; call it through ``asyncio.to_thread`` from async code.

        Raises:
            RenderError: If the PDF could not be produced
        """
        try:
            buffer = io.BytesIO()
            pdf = canvas.Canvas(buffer, pagesize=self.page_size)
            pdf.setTitle(f"Certificate {data.certificate_id}")
            self._draw(pdf, data)
            pdf.showPage()
            pdf.save()
        except Exception as e:
            logger.exception(
                "certificate_render_failed",
                certificate_id=data.certificate_id,
                error=str(e),
            )
            raise RenderError(f"Failed to render certificate: {e}") from e

        return buffer.getvalue()

    def _draw(self, pdf: canvas.Canvas, data: CertificateTemplateData) -> None:
        width, height = self.page_size
        center = width / 2

        pdf.setStrokeColor(TITLE_COLOR)
        pdf.setLineWidth(3)
        pdf.rect(30, 30, width - 60, height - 60)

        # (font, size, color, text, y offset from the top)
        lines = [
            ("Helvetica-Bold", 36, TITLE_COLOR, "Certificate of Completion", 150),
            ("Helvetica-Bold", 24, NAME_COLOR, data.student_name, 220),
            (
                "Helvetica",
                18,
                TITLE_COLOR,
                "has successfully completed the course",
                280,
            ),
            ("Helvetica-Bold", 20, COURSE_COLOR, f'"{data.course_title}"', 320),
            (
                "Helvetica",
                12,
                MUTED_COLOR,
                f"Certificate ID: {data.certificate_id}",
                400,
            ),
            (
                "Helvetica",
                12,
                MUTED_COLOR,
                f"Issued on: {data.issued_at.strftime('%Y-%m-%d')}",
                420,
            ),
        ]
        if data.verify_url:
            lines.append(
                ("Helvetica", 10, MUTED_COLOR, f"Verify at: {data.verify_url}", 450)
            )

        for font, size, color, text, offset in lines:
            pdf.setFont(font, size)
            pdf.setFillColor(color)
            pdf.drawCentredString(center, height - offset, text)
