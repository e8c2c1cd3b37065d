"""Issue Tracker — a small REST API for tracking work items.

Users register and log in with email/password, then create, filter,
transition and delete issues they own. Backed by async SQLAlchemy,
authenticated with stateless JWT bearer tokens.
"""

__version__ = "0.1.0"
