"""Test doubles and factories for the bridge."""
