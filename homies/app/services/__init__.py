"""
Service layer.

Each service encapsulates business logic for a domain and receives its
``Database`` handle through the constructor.
"""
