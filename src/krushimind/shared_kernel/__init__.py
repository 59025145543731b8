"""Shared Kernel module.

This module contains foundational components that are explicitly shared by
the record-creation flows and the synchronization machinery: storage value
objects, outbox value objects, the record-type route table, and the probes
both sides report through.

Changes to this module affect every context and should be carefully
coordinated.
"""
