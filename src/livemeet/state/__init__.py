"""State layer.

Live platform state derivation and the single authoritative snapshot.
"""
