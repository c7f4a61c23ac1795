"""Outbound SMS gateways."""
