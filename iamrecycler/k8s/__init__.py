"""Kubernetes wiring: API client loading, the IAMRecycler resource, status persistence."""
