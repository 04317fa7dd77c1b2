"""Shared helpers: errors, logging, process execution and path joining."""
