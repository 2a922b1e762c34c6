"""Client-side state reconciliation for Snail Points."""
