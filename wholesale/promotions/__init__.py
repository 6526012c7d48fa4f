"""Promotion records, activation windows, scope matching and resolution."""
