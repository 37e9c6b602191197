"""
Services module for the translate gateway
"""
from .entitlement import EntitlementChecker, normalize_trial_boundary
from .pipeline import TranslatePipeline

__all__ = ['EntitlementChecker', 'normalize_trial_boundary', 'TranslatePipeline']
