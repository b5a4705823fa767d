"""
ScanBrief: AI security summaries for host scan datasets.

Sends host/service scan data (for example Censys exports) to a
chat-completion provider selected by logical model name and returns
the model's security assessment.
"""

__version__ = "2.0.0"
