"""Maintenance tools for views-distinct."""
