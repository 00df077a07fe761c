"""Property-based tests for modpurger.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of. The purge engine deletes data,
so the codec and the deletion pool get this treatment.

Test categories:
- core/: Filename codec, block window and deletion pool properties
"""
