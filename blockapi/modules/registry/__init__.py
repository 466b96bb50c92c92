"""
Registry Module - Black Box Interface

Purpose: Keep the set of active capabilities and the routes derived from them
Interface: Registry.upsert(), get(), list(), remove(), load_from_directory();
           RouteTable.resolve(), allowed_methods(), routes()
Hidden: Copy-on-write storage, route derivation, root opcode rules

Nothing outside this module mutates the opcode map or the route table.
"""

from .registry import ROOT_OPCODE, Registry
from .routes import Route, RouteTable, route_path

__all__ = ["Registry", "RouteTable", "Route", "route_path", "ROOT_OPCODE"]
