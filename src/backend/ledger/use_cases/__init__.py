"""Use-case level logic.

These modules implement the ledger's behaviour (identity, aggregation,
request lifecycle, master data, entry forms) on top of rows returned by the
row store integration.

They should be:
- deterministic where they only transform rows
- unit-testable with a stub row store
- free of web/framework code
"""
