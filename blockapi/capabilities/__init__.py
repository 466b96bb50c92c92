"""
Built-in capabilities.

Every module in this directory (except the reserved shared ones) exports one
Capability named after the file and is loaded into the registry at startup.
"""
