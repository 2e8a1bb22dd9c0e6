"""
Application layer: ports, DTOs, pipeline utilities and use cases.
"""
