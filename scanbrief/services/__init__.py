"""
Services package for ScanBrief.
"""
