"""
Web Initialization Module.

This module contains all initialization logic split into focused modules:
- logging: Logger configuration
- services: Scanner, payout client and lock setup
- shutdown: Graceful shutdown handler
"""

__all__ = []
