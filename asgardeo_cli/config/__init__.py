"""Packaged default settings (config/settings/*.yaml)."""
