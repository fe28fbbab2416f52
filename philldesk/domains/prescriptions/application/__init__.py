"""Prescription application layer: DTOs, ports, store and services."""
