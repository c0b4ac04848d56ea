"""Utility helpers for Darkroom."""
