"""
Core business logic for the object gallery.

This module is framework-agnostic - it doesn't import FastAPI, motor,
or boto3. This separation means we can test the lifecycle logic in
isolation and swap infrastructure if needed.
"""
