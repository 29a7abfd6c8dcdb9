"""
Core building blocks shared by the scheduling domain.
"""
