"""Pure Micropub rules: body shapes, normalization, ids, the frontmatter format.

No I/O and no settings. Imports stay within the standard library, pydantic,
and this package.
"""
