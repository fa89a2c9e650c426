"""
Service layer.

Business rules live here so that API handlers stay thin and the
storage format can change without touching them.
"""
