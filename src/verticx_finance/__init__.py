"""Verticx finance package.

Organized by feature modules (fees, payroll, leaves, academics, promotion)
with a thin Flask controller layer over service/repository layers. The
settlement computations (calendar, allocator, ledger, payroll calculator,
promotion settlement) are pure functions over already-fetched records.
"""
