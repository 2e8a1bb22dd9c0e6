"""
Persistence adapters.
"""
