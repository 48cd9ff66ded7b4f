"""Availability app package.

This app tracks when each bookable unit is unavailable and decides
reservation requests against that ledger. Check-and-reserve runs under
a per-unit lock inside one database transaction, so overlapping
reservations of the same unit cannot both be accepted.
"""
