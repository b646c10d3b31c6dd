"""
Command-line entry points
"""
