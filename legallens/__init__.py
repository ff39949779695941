"""
LegalLens 360 - AI Contract Auditor

Uploads one or two contract documents (PDF or image) to a hosted Gemini model,
requests a structured legal-risk report for the chosen analysis mode (audit,
compare, rewrite, explain), validates it, and serves it together with a
follow-up chat about the findings.
"""

__version__ = "1.0.0"
