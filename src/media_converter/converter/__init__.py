"""Conversion daemon core and transports."""
