"""Feature flags for SpaceProof.

Payload integrity checking is ON by default: link checks alone catch
reordering and deletion, payload recomputation catches content edits.
"""

# verify(): recompute every payload_hash in addition to chain links
FEATURE_PAYLOAD_INTEGRITY_CHECK = True

# Demo sessions subscribe the logging observer to their ledger
FEATURE_RECEIPT_LOGGING_ENABLED = True
