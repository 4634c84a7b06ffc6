"""
Infrastructure Layer
=====================

Low-level technical concerns:
- JSON logging setup with correlation ids
"""
