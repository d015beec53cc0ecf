"""
pkgmanifest subcommands.
"""
