"""
Identity Bounded Context
=========================

Accounts, password checks, access tokens and role gating.
"""
