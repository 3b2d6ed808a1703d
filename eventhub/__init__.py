"""
Event discovery and recommendation service.
"""
