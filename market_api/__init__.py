"""Marketplace catalog API."""
