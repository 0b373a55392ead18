"""
Genesys Cloud interactions dashboard.
CSV ingestion, interaction metrics and the interactive table engine behind the Dash UI.
"""

__version__ = "0.1.0"
