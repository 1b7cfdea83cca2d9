"""
Boundary layer for external system integrations.

Handles all interactions with the editorial backend.
Provides adapters implementing the core's client interfaces.
"""
