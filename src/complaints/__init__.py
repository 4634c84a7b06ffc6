"""
Complaints Module
=================

Bounded Context for maintenance complaints in a residential building.

Responsibilities:
- Accept complaints filed by residents
- Let admins provision technicians and assign them by specialization
- Track status updates until resolution
- Derive SLA escalation on read
- Provide dashboard analytics
"""

__version__ = "1.0.0"
