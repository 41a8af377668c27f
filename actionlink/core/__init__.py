"""
Core services: configuration, persistence client, exceptions
"""
