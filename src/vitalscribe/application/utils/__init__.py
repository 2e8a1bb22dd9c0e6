"""
Pure pipeline stages used by the import and export use cases.
"""
