# This package groups reusable Streamlit components used by multiple dashboard pages.
# It exists to keep visual patterns consistent across tabs.
# Sharing these helpers keeps page modules focused on layout.

__all__ = ["summary_cards", "tables", "charts"]
