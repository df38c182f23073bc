"""
Adapter layer for the Downloads API.

Contains the object storage abstraction with local filesystem and S3
implementations selected by deployment mode.
"""
