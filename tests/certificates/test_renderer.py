"""Tests for the reportlab certificate renderer."""

from datetime import UTC, datetime

import pytest

from src.certificates.renderer import CertificateRenderer, CertificateTemplateData
from src.core.exceptions import RenderError


@pytest.fixture
def data() -> CertificateTemplateData:
    return CertificateTemplateData(
        certificate_id="8f14e45f-ceea-4e7a-9d3c-1b2a3c4d5e6f",
        student_name="Ada Lovelace",
        course_title="Analytical Engines",
        issued_at=datetime(2024, 5, 17, tzinfo=UTC),
        verify_url="https://lms.example.com/verify/8f14e45f-ceea-4e7a-9d3c-1b2a3c4d5e6f",
    )


class TestCertificateRenderer:
    """Tests for CertificateRenderer.render."""

    def test_produces_pdf(self, data: CertificateTemplateData):
        """Should return a single PDF document."""
        content = CertificateRenderer().render(data)

        assert content.startswith(b"%PDF")
        assert content.rstrip().endswith(b"%%EOF")

    def test_without_verify_url(self, data: CertificateTemplateData):
        """Should render when no verification URL is known."""
        content = CertificateRenderer().render(
            CertificateTemplateData(
                certificate_id=data.certificate_id,
                student_name=data.student_name,
                course_title=data.course_title,
                issued_at=data.issued_at,
            )
        )

        assert content.startswith(b"%PDF")

    def test_failure_raises_render_error(self, data: CertificateTemplateData):
        """Should wrap drawing failures in RenderError."""
        broken = CertificateTemplateData(
            certificate_id=data.certificate_id,
            student_name=data.student_name,
            course_title=data.course_title,
            issued_at=None,
        )

        with pytest.raises(RenderError) as exc_info:
            CertificateRenderer().render(broken)

        assert exc_info.value.code == "render_error"
        assert exc_info.value.retryable is True
