"""
git-wayback - pin a repository to the state it was in at a past moment.

Given a repository and a wayback time, report the newest tag and the newest
commit that were committed strictly before that time.
"""

__version__ = "0.1.0"
__author__ = "git-wayback developers"
