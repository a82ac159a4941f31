"""Compiler backends for the bundle build pipeline.

Each backend package auto-registers itself with the CompilerRegistry
when imported.
"""

# Backend packages are imported dynamically by CompilerRegistry.discover_backends()
