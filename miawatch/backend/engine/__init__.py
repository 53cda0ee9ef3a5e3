"""engine/__init__.py"""
from .alerts import AlertManager
from .analyzer import PatternAnalyzer
from .engine import DetectionEngine
from .models import AggregateStats, Alert, AlertSeverity, AnalysisResult, SignalResult, ThreatLevel

__all__ = [
    "DetectionEngine",
    "PatternAnalyzer",
    "AlertManager",
    "AggregateStats",
    "Alert",
    "AlertSeverity",
    "AnalysisResult",
    "SignalResult",
    "ThreatLevel",
]
