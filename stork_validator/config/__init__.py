"""
Configuration module.

Defaults, file loading with CLI overrides, and startup validation.
"""
