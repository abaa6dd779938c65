"""
Per-cell derivations computed between decoding and writing: cell shapes,
part IDs and the padded point/cell fields.
"""
