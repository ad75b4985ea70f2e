"""Graduation ceremony registration service."""
