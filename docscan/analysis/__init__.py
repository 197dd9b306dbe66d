from docscan.analysis.analyzer import DocumentAnalyzer
from docscan.analysis.client_base import BaseVisionClient
from docscan.analysis.factory import AnalyzerFactory

__all__ = ["AnalyzerFactory", "BaseVisionClient", "DocumentAnalyzer"]
