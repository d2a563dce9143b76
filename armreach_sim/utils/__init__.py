"""
Shared constants, logging setup, and helper utilities.

Centralizes key bindings, arm geometry, camera parameters and small
stateless helpers used across the armreach_sim package.
"""
