"""MAGNA token-sale protocol application package."""
