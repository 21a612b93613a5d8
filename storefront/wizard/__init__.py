"""
Wizard modules.

Modules:
    state_machine - Four-step add/edit product wizard
"""

from .state_machine import STEP_TITLES, Navigator, ProductWizard, SubmissionOutcome

__all__ = ['Navigator', 'ProductWizard', 'STEP_TITLES', 'SubmissionOutcome']
