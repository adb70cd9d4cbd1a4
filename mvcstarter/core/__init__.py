"""Core of the starter: environment loading, configuration, routing and the
controller/action dispatch contract.

Modules in this package should be framework-agnostic where possible; the
FastAPI specifics live in ``http`` and ``middleware``.
"""
