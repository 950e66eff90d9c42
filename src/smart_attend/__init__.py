"""Smart Attend data-access package.

Organized by feature modules (attendance, dashboard, ...) with a thin Flask
controller layer over service/repository layers that read a Firestore
document store through a two-tier (pre-aggregated, then raw) strategy.
"""

__version__ = "1.0.0"
