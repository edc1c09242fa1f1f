"""
ar_ingestion -- weekly AR summary CSV ingestion.

Provides the CSV adapter, cell normalization, the parser/validator and the
import service that applies validated batches to the weekly record store.

Architecture:
    ar_ingestion/ is a top-level package. Nothing in ar_kernel/ or
    ar_engines/ imports from ingestion.
"""
