"""Woven Circles: a community mutual-aid feed and resource map API."""

__version__ = '0.1.0'
