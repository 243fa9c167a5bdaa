"""Membership, invitation code and community services."""
