"""
Infrastructure Layer

Cache tiers, key construction and remote store adapters.
"""
