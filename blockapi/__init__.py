"""
Blockapi - Capability Endpoint Runtime

Serves a growing set of named capabilities (opcodes) over HTTP. Every
capability is a block of metadata (display text, parameter schema, auth
requirement) plus a handler. New capabilities can be hot-registered from
Python source at runtime.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- capability: Definition data model and parameter schemas
- registry: Opcode registry and derived route table
- pipeline: Request context and ordered request stages
- dispatch: Route resolution, handler invocation, response rendering
- loader: Hot registration from source text
- auth: Bearer token authentication
- audit: Audit trail of registry mutations
- services: Service locator handed to handlers
- api: Wire models
"""

__version__ = "1.0.0"
