# This package contains page renderers for each dashboard tab and the sign-in view.
# It exists so app.py stays focused on session gating and tab orchestration.
# Each module exposes render() and receives data or a backend runner from app.py.

__all__ = ["overview", "risk_register", "create_risk", "sign_in"]
