"""
Business domains of the clinic platform.
"""
