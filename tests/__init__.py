"""Test suite for the leaseform rental application engine.

This package contains tests for:
- Field table, variants and record helpers
- Validation engine (step gates and submission checks)
- Formatting of the review and the application email
- Submission pipeline stages and failure reporting
- Wizard state machine, event system and wizard navigation
- Integration scenarios through ApplicationRuntime
"""
