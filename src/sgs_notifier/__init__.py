"""Top-level package for the SGS contact notifier.

The notifier polls the website's ``contacts`` table and texts staff
about submissions nobody has acknowledged yet.  The command-line
interface lives in :mod:`sgs_notifier.cli`, the poll loop in
:mod:`sgs_notifier.orchestration`, database access in
:mod:`sgs_notifier.db` and :mod:`sgs_notifier.store`, and Twilio
delivery in :mod:`sgs_notifier.notify`.
"""

__version__ = "0.1.0"

__all__ = [
    "cli",
    "db",
    "notify",
    "orchestration",
    "store",
]
