"""
Family Finance - Source Package

Financial record construction and cross-domain reporting core for a
family household-management platform.

DESIGN PRINCIPLES:
1. Untrusted input in, validated value objects out
2. Fail early, fail visibly
3. Defaults are resolved in one documented order
4. Amounts only meet after conversion to one reporting currency
5. Stores are reached through a parameterized query capability
"""

__version__ = "1.0.0"
__author__ = "Family Finance Team"
