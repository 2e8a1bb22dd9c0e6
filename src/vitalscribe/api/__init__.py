"""
HTTP surface for the interchange engine.
"""
