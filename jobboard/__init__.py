"""
Data-access layer for the job marketplace: users, their profile
collections, and job posts.
"""

__version__ = "0.1.0"
