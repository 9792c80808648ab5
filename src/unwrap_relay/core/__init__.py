"""Core relay implementation.

This package contains the components of the TCP relay:
- Per-connection sessions and their directional pipes
- Termination coordination and traffic reporting
- The threaded acceptor and address resolution
- Aggregate statistics and the live status panel
- Exception handling

The core package receives resolved endpoints from the command line
layer and reports everything it does through log lines.
"""
