"""
Typeahead suggestion engine.

This package turns partial search input into a debounced, cancellable stream
of merged suggestions, keeps a bounded search history and drives keyboard
selection over the suggestion dropdown.
"""

__version__ = "1.0.0"
