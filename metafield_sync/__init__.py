"""Shopify metafield sync: CSV attribute import into product metafields."""

__version__ = "0.1.0"
