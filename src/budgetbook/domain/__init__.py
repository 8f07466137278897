"""Domain layer for budgetbook application.

Services are imported from their modules (``budgetbook.domain.transaction``
etc.); this package stays import-free so the database layer can load
``budgetbook.domain.entities`` without a cycle.
"""
