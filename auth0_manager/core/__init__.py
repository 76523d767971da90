"""Core Business Logic Module

Query compilation, authorization and user operations against the Auth0
Management API, independent of Flask.

Module Structure:
    - management/        : Low-level Management API client
    - lucene.py          : Mongo-style filter -> Auth0 search request
    - sorting.py         : Client-side multi-key sort
    - scopes.py          : Token scope store and checks
    - metadata.py        : Deep merge of user/app metadata
    - bulk.py            : Enumeration and fan-out for multi-record calls
    - validators.py      : Email and password strength checks
    - users_service.py   : /auth0/users service verbs
    - tickets_service.py : /auth0/tickets service verbs

Usage Pattern:
    Import explicitly when needed:
        from auth0_manager.core.lucene import convert
        from auth0_manager.core.users_service import UsersService
"""
