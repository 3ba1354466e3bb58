"""Stagnant-production monitoring for manufacturing floors."""
