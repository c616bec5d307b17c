"""
IMDF Builder backend: indoor-map drawing persistence and IMDF export.
"""
