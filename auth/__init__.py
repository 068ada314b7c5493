"""auth/ -- Token check, session table, and request gating for the Mitfahrbörse.

Layer rule: auth/ imports only core/ plus stdlib and third-party libraries.
It does NOT import from api/ or board/.
api/ imports from auth/, not the other way around.
"""
