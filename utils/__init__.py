"""
utils package
-------------

Contains utility modules used throughout the scheduling application.

Includes helpers for loading configuration constants, time-of-day arithmetic, input validation, payload conversion, and logging setup.
"""
