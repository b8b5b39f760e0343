"""
Wholesale Kernel - inventory reservation and order lifecycle core.

A transactional stock ledger and order state machine with:
- Non-negative available/reserved quantities per product
- Two-phase reservation accounting (reserve -> confirm or release)
- Atomic multi-aggregate order workflows
- Append-only inventory transaction log
- Post-commit, fire-and-forget notifications
"""

__version__ = "0.1.0"
