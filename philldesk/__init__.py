"""
PhillDesk prescription client.

State management for the customer prescription lifecycle: uploads with
progress tracking, prescription list and statistics, and status-change
notifications on top of the PhillDesk REST API.
"""

__version__ = "1.0.0"
