"""
应用层
"""
from .render_orchestrator import RenderOrchestrator
from .error_classifier import ErrorClassifier

__all__ = ["RenderOrchestrator", "ErrorClassifier"]
