"""
Core infrastructure: database gateway, errors, logging, payload parsing
"""
