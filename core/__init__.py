"""core/ -- Configuration, error taxonomy, and database plumbing.

Layer rule: core/ is the kernel. It imports only stdlib + third-party
libraries and never from api/, auth/, or board/.
"""
