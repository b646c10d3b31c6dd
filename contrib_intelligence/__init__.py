"""
Contributor Intelligence
Attributes public repository contributions to organizations
"""

__version__ = "1.0.0"
