"""
idxmirror - A local mirror of a remote package index.

This package keeps a copy of the package index tarball on disk and
answers version queries by streaming it.

Modules:
- cli: Command-line interface entry point.
- operations: Core command implementations.
- index: Index handle and transport selection.
- git_sync: Index sync through git.
- http_sync: Index sync through a conditional HTTP download.
- scanner: Version lookups over the index tarball.
- config: Configuration management.
- downloader: requests session wrapper.
"""

from .cli import main

__all__ = ["main"]
