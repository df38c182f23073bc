"""
Configuration management for the Downloads API.

Contains Pydantic settings that work across local-dev, aws-mock, and aws-prod
deployment modes.
"""
