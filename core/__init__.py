"""
Core - settings and structured logging shared by all packages.
"""
