"""
Data models for ScanBrief
"""
from .analysis import AnalysisRequest, AnalysisResult

__all__ = ['AnalysisRequest', 'AnalysisResult']
