"""
Contribution scoring and organization-level aggregation
"""
