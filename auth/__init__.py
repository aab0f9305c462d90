"""auth/ -- Credential storage, session tokens, and request authentication.

Layer rule: auth/ imports only core/ + stdlib + third-party libraries.
It does NOT import from api/, academics/, cache/, or client/.
api/ imports from auth/, not the other way around.
"""
