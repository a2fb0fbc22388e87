"""
Web application package for the chess opponent.

Provides a FastAPI-based REST API that a browser board calls once per
turn to play against the engine.
"""
