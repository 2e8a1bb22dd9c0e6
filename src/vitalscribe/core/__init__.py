"""
Core infrastructure: configuration, logging, authentication and shared constants.
"""
