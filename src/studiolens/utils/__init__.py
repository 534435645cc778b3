"""Shared utilities for studiolens."""
