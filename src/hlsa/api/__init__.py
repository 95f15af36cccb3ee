"""HLSA API package."""
