"""
Shared utilities: errors, logging and health checks
"""
