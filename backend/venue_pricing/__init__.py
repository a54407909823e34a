"""Hierarchical venue pricing service."""
