"""
finplan - Source Package

Financial normalization and forecasting engine for a household
planning workspace.

DESIGN PRINCIPLES:
1. Raw records in, canonical entities out
2. Normalization is total: defaults, never exceptions
3. Every computation is pure and takes "now" as an argument
4. Ratios are guarded: no NaN or infinity crosses into payloads
5. The record source is swappable
"""

__version__ = "1.0.0"
__author__ = "finplan team"
