"""Tax assessment service package."""

from services.taxes.service import TaxAssessor
from services.taxes.types import TaxAssessmentRequest, TaxLine

__all__ = ["TaxAssessmentRequest", "TaxAssessor", "TaxLine"]
