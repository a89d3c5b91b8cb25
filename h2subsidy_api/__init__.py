"""
H2 Subsidy API - milestone tracking backend for green-hydrogen subsidies.

Provides REST endpoints for:
- Account signup and role-gated login
- Registering vendors (producers) and listing them
- Recording progress toward a vendor's milestone goal
- Flagging a vendor's subsidy as paid
- Resetting all data for demo re-runs
"""

__version__ = "0.1.0"
