"""Shared infrastructure: exceptions, logging, API models."""
