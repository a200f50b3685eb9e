"""Collaborator contracts and the shared application context.

Kept free of FastAPI concerns so it can be reused by the webhook, the console and tests.
"""
