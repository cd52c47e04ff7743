"""
Shared domain primitives (base model, errors)
"""
