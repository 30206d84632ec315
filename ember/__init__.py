"""Ember: production-only policy checks with a personality."""
