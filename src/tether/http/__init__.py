"""Canonical HTTP types shared by every runtime adapter."""
