"""Booking lifecycle service for the fleet rental platform."""

__version__ = "1.0.0"
