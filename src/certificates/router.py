"""Certificate endpoints.

Provides routes for:
- Explicit issuance for a completed enrollment
- Public verification
- Listing, fetching and downloading certificates
"""

from uuid import UUID

from fastapi import APIRouter, Response

from src.core.exceptions import LMSError, to_http_exception

from .dependencies import CertificateServiceDep
from .schemas import (
    CertificateListResponse,
    CertificateResponse,
    IssueCertificateRequest,
    VerifyCertificateResponse,
)


router = APIRouter(prefix="/v1/certificates", tags=["certificates"])


@router.post(
    "/issue",
    response_model=CertificateResponse,
    summary="Issue certificate",
    description="Issue the certificate of a completed enrollment, or return the existing one.",
)
async def issue_certificate(
    data: IssueCertificateRequest,
    certificate_service: CertificateServiceDep,
) -> CertificateResponse:
    """Get or issue the certificate of an enrollment."""
    try:
        certificate = await certificate_service.get_or_issue_certificate(
            data.student_id, data.course_id
        )
    except LMSError as e:
        raise to_http_exception(e) from e
    return CertificateResponse.from_entity(certificate)


@router.get(
    "/verify/{certificate_id}",
    response_model=VerifyCertificateResponse,
    summary="Verify certificate",
)
async def verify_certificate(
    certificate_id: str,
    certificate_service: CertificateServiceDep,
) -> VerifyCertificateResponse:
    """Public check that a certificate id was issued."""
    result = await certificate_service.verify_certificate(certificate_id)
    return VerifyCertificateResponse(**result)


@router.get(
    "/student/{student_id}",
    response_model=CertificateListResponse,
    summary="List student certificates",
)
async def list_student_certificates(
    student_id: UUID,
    certificate_service: CertificateServiceDep,
) -> CertificateListResponse:
    """List every certificate issued to a student."""
    certificates = await certificate_service.list_student_certificates(student_id)
    return CertificateListResponse(
        items=[CertificateResponse.from_entity(c) for c in certificates],
        total=len(certificates),
    )


@router.get(
    "/{certificate_id}",
    response_model=CertificateResponse,
    summary="Get certificate",
)
async def get_certificate(
    certificate_id: str,
    certificate_service: CertificateServiceDep,
) -> CertificateResponse:
    """Get a certificate by id."""
    try:
        certificate = await certificate_service.get_certificate(certificate_id)
    except LMSError as e:
        raise to_http_exception(e) from e
    return CertificateResponse.from_entity(certificate)


@router.get(
    "/{certificate_id}/download",
    response_class=Response,
    summary="Download certificate PDF",
)
async def download_certificate(
    certificate_id: str,
    certificate_service: CertificateServiceDep,
) -> Response:
    """Stream the stored PDF as an attachment."""
    try:
        certificate, content = await certificate_service.get_certificate_file(
            certificate_id
        )
    except LMSError as e:
        raise to_http_exception(e) from e

    filename = f"certificate-{certificate.certificate_id}.pdf"
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
