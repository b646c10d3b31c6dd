"""
Core infrastructure: configuration, logging, fetch layer and orchestration
"""
