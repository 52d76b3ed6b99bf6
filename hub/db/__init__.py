"""Persistence layer for the Analytics Hub."""
