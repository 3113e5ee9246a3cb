"""
Configuration loading and validation.

Provides frozen settings objects built from environment variables (and a
project `.env`), validated when loaded.
"""
