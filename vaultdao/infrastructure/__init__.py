"""
Infrastructure - settings, database, logging
"""
