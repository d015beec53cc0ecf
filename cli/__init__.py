"""
Command-line interface for project manifests.
"""
