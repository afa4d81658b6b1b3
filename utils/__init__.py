"""
utils package
-------------

Contains utility modules used throughout the compliance engine.

Includes the regulatory constants loader, logging setup, and serialization helpers for the API layer.
"""
