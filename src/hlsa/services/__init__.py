"""HLSA services package."""
