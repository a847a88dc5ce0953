"""Favorites and adoption applications."""
