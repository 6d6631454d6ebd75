"""
Engagement scoring pipeline.

signals -> scoring -> batch -> reporting, each stage in its own package.
"""
