"""ScanBriefUI - HTTP API for ScanBrief."""
