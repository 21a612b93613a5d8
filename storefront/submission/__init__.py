"""
Submission modules.

Modules:
    strategy - Metadata-only vs. full (upload first) submission
"""

from .strategy import SubmissionPath, SubmissionStrategySelector, choose_path

__all__ = ['SubmissionPath', 'SubmissionStrategySelector', 'choose_path']
