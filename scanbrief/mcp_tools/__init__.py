"""MCP tool registrations for ScanBrief."""
