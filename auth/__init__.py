"""auth/ -- Authentication package for the account service.

Password hashing, session tokens, the credential and session-token
authenticators, and their failure taxonomy.

Layer rule: auth/ imports only core/, docstore/, stdlib and third-party
libraries. It does NOT import from api/. api/ imports from auth/, not the
other way around.
"""
