"""
Integration tests

These tests start real MongoDB containers and need a reachable Docker daemon;
they are skipped otherwise. Leftover containers are found by label and
removed before and after the session.
"""
