"""
Core components shared across PhillDesk domains.
"""
