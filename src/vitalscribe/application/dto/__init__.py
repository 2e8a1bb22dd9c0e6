"""
Data transfer objects for the interchange pipeline.
"""
