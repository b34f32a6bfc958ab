"""Shared helpers for the package parsers: ZIP access, units, XML events, images."""
