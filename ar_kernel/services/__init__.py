"""Kernel services: the weekly record store write path."""

from ar_kernel.services.weekly_record_store import ApplyResult, WeeklyRecordStore

__all__ = ["ApplyResult", "WeeklyRecordStore"]
