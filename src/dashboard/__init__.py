# This package contains the Streamlit GRC dashboard built on the session-refreshing backend client.
# It exists so auditors and risk owners can review activity and manage risks from one place.
# The modules separate data access, UI components, and page rendering to keep maintenance straightforward.

__all__ = ["app"]
