"""
Unit tests

These tests never talk to Docker: containers are replaced by in-memory fakes
that record the startup parameters and replay scripted exec results.
"""
