"""
Page collectors: commits, pull requests, issues, single-PR views and user profiles
"""
