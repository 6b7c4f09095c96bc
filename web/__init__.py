"""
Web application package for the chess engine.

Provides a FastAPI-based JSON API for requesting engine moves and static
evaluations of arbitrary positions.
"""
