"""
Core utilities shared across the contacts API:
configuration, structured logging and password/token hashing helpers.
"""
