"""
ionwallet - Inheritance-aware wallet layer built on ioncore

Provides spend building, the CSV vault ("will") transactions, blockchain
data sources, configuration and the ion-wallet CLI.
"""

__version__ = "0.3.0"
