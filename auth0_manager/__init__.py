"""Auth0 user management package.

To use the Flask app:
    from auth0_manager.flask_app import create_app

To add the services to an existing Flask app:
    from auth0_manager.extension import init_app

To compile a filter without Flask:
    from auth0_manager.core.lucene import convert
"""
# Note: flask_app is not imported here so the core can be used without Flask
