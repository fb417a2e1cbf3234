"""Page library modules for shared utilities and page-specific functions.

Structure:
    - common/: Formatting and export helpers used across all pages
    - budgets/: Budget planner components
    - calendar/: Admin calendar components
"""

__all__ = ['common', 'budgets', 'calendar']
