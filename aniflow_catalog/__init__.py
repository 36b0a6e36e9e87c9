"""Launcher package for the AniFlow catalog service."""
