"""Ace Aptitude API."""
