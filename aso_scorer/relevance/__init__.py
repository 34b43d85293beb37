"""Token relevance tiers (0–3) with per-evaluation override caching."""
