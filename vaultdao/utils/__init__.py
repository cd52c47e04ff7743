"""
Utilities - metrics, tracing, request logging
"""
