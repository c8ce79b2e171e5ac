"""Typed data models shared across the cloning pipeline."""
