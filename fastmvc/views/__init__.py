"""View rendering module for HTTP responses.

Views are rendered through the engine registry; this module turns the
rendered output into Starlette responses.
"""
