"""
Talent Trust - reputation scoring for marketplace talent.

Scores every talent 0-100 from six behavioral signals and exposes the
result to admins over HTTP and as a batch job.
"""
__version__ = "1.0.0"
