"""
Service layer: domain logic and external collaborators.
"""
