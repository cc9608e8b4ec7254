"""Application layer entry points.

Holds the engine and the services that coordinate domain logic with adapters.

Import directly from submodules, e.g.:
    from typeahead.application.typeahead_engine import TypeaheadEngine
    from typeahead.application.history_service import SearchHistoryService
"""
