"""
HTTP API for Local Gov Watch.
"""
