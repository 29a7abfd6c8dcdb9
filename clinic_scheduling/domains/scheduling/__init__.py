"""
Scheduling Domain

Appointment booking, availability and lifecycle for clinic doctors.
"""
