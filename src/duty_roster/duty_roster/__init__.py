"""Duty Roster package.

This package is organized by feature modules (eligibility, rosters, swaps)
with a thin Flask controller layer and service/repository layers behind it.
"""
