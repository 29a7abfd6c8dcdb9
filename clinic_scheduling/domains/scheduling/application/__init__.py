"""
Scheduling Application Layer

Use cases, ports and request/result DTOs.
"""
