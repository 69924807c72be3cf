"""Liveness greeting and cached service stats."""
