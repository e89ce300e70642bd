"""
Command-line interface for CorteX Map.
"""
