"""
Core feed logic and store clients.
"""
