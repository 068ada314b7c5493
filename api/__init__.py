"""api/ -- HTTP layer: FastAPI app, wire models, and routes.

api/ is the only layer allowed to import from auth/, board/, and core/ together.
"""
