"""Catalog records and the read-only product snapshot used for pricing."""
