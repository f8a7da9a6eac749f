"""Vitrine - async furniture catalog backend."""
