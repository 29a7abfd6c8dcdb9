"""
Scheduling Persistence Layer
"""
