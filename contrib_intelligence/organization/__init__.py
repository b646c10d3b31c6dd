"""
Organization affiliation detection from profile fields, org memberships and email domains
"""
