"""
Visited-region model: identity, kind, and the recency-derived base style.
"""
