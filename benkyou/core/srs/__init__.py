"""Spaced-repetition primitives shared by the services."""
