"""
Database engine and session management.
"""
