"""HTTP layer: FastAPI app factory, session middleware, form parsing and routers."""
