"""
Auth Module Tests
----------------
Test suite for the token codec, session store, auth orchestrator,
request authenticator and role-based authorization.
"""
