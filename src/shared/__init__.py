"""
Shared Kernel Module
====================

Shared infrastructure used by the complaints module: structured logging
and HTTP middleware.

Architecture Pattern: Modular Monolith
- Each module (complaints) owns its domain, application and interfaces
- Shared kernel contains only generic infrastructure

DO NOT add complaint business logic to the shared kernel.
"""

__version__ = "1.0.0"
