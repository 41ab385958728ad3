"""Utilities for the BLE soil sensor client."""
