"""board/ -- Bulletin-board entries: domain models, validation rules, and the entry store.

Layer rule: board/ imports only core/ plus stdlib and third-party libraries.
It does NOT import from api/ or auth/.
"""
