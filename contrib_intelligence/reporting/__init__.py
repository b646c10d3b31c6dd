"""
Report generation and export
"""
