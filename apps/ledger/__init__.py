"""Ledger app package.

Credits are the currency of the platform: patients receive them monthly
through their subscription plan and spend them on appointments, doctors
earn them and cash them out through payouts. Every change is an
append-only ``CreditTransaction``; ``CustomUser.credits`` is a cached
projection of the ledger sum written in the same transaction.
"""
