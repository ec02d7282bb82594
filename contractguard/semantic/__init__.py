from contractguard.semantic.analyzer import SemanticAnalyzer
from contractguard.semantic.base import BaseSemanticAnalyzer
from contractguard.semantic.factory import SemanticAnalyzerFactory

__all__ = ["BaseSemanticAnalyzer", "SemanticAnalyzer", "SemanticAnalyzerFactory"]
