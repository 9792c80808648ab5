"""Command line interface modules.

This package provides the command-line entry point for:
- Parsing the local and remote addresses
- Resolving both endpoints before any socket is opened
- Starting the relay server and the optional status panel
- Reporting fatal startup errors

The command modules only prepare configuration; everything that
touches a proxied connection lives in the core package.
"""
