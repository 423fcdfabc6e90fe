"""
Backend package for the Heart2Heart Welfare site.

This package provides a FastAPI application serving the site content
(home, about, contact, members, gallery) and the contact-form submission
log from a pluggable document store, plus the content client and page
builders the public pages use.
"""
