"""
Dispatch Desk Modules
=====================

Feature modules that plug into a host Flask app as blueprints.
"""
