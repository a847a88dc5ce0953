"""
Preference-based match ranking.

Responsibilities:
- Score every available animal against the adopter's effective preference.
- Diversify, boost fresh and well-presented listings, and truncate.
- Keep the produced matches and their status changes for later lookup.
"""
