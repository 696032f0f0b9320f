"""
Credential Service - username/password registration and login backend
"""
