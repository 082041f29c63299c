"""Certificate issuance module.

Provides:
- At-most-once issuance per (student, course)
- PDF rendering and artifact storage
- Public verification by certificate id
"""

from .models import CERTIFICATES_TABLES_CQL, Certificate


__all__ = ["CERTIFICATES_TABLES_CQL", "Certificate"]
