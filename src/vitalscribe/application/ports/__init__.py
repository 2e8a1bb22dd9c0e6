"""
Ports: abstract interfaces the application layer depends on.
"""
