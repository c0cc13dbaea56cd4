"""
Admin API package
"""
