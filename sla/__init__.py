# SLA Package
from sla.config import SLAConfig, DEFAULT_SLA
from sla.classifier import classify_confidence

__all__ = ["SLAConfig", "DEFAULT_SLA", "classify_confidence"]
