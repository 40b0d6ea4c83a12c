"""
Prep Pricing Package

Tiered pricing resolution and invoice computation for prep-center shipments.
Resolves line pricing using Service → Package Tier → Rate pipeline, then
aggregates lines, add-on services and discounts into an invoice.
"""

__version__ = "1.0.0"
