from app.quality.analyzer import QualityAnalyzer
from app.quality.base import BaseQualityService
from app.quality.factory import QualityServiceFactory
from app.quality.models import QualityReport

__all__ = ["BaseQualityService", "QualityAnalyzer", "QualityReport", "QualityServiceFactory"]
