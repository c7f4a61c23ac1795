"""Booking domain rules."""
